from pygments.style import Style
from pygments.token import Keyword, Name, Number, Punctuation, String, Token


class LogStyle(Style):
    """Muted palette for the JSON tail ExtraFormatter appends to log lines."""

    background_color = None  # pyright: ignore [reportAssignmentType]
    styles = {
        Token: "#8a8a8a",
        Punctuation: "#6c6c6c",
        Name.Tag: "#5f87af",
        String: "#87af87",
        String.Double: "#87af87",
        Number: "#d7af5f",
        Keyword.Constant: "#af87af",
    }
