"""All CSS strings for the hearth terminal host."""


APP_CSS = """
Screen {
    background: $background;
    overflow: hidden;
    scrollbar-size: 0 0;
}

#search-bar {
    height: 3;
    padding: 0 1;
}

#query {
    width: 1fr;
    border: tall $primary-darken-2;
}

#query:focus {
    border: tall $primary;
}

#dropdown {
    width: auto;
    min-width: 10;
    height: 3;
    content-align: center middle;
    padding: 0 1;
    color: $text-muted;
}

#dropdown.empty {
    display: none;
}

#items {
    height: 1fr;
    border: none;
    padding: 0 1;
}

#action-menu {
    display: none;
    dock: right;
    width: 40;
    height: auto;
    max-height: 60%;
    margin: 1 2 2 0;
    padding: 0 1;
    background: $panel;
    border: round $primary;
}

#action-menu.open {
    display: block;
}

#toast {
    height: 1;
    padding: 0 1;
    color: $text;
}

#toast.loading {
    color: $warning;
}

#toast.success {
    color: $success;
}

#toast.error {
    color: $error;
}

#action-bar {
    height: 1;
    padding: 0 1;
    background: $panel;
    color: $text-muted;
}
"""

HIDDEN_CSS = """
HiddenScreen {
    align: center middle;
    background: $background;
}

#hidden-note {
    width: auto;
    color: $text-disabled;
}
"""
