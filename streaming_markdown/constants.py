"""Constants used across the streaming-markdown package."""

from __future__ import annotations

import re

# Inline marker characters
STRIKETHROUGH_CHAR = "~"
STRIKETHROUGH_LENGTH = 2
DELIMITER_CHARS = frozenset("*_~")
BACKTICK = "`"
DOLLAR = "$"
BACKSLASH = "\\"

# Block patterns
CODE_FENCE_PATTERN = re.compile(r"^(?P<indent>[ \t]{0,3})(?P<fence>`{3,}|~{3,})(?P<info>[^\n]*)")
CLOSING_FENCE_MAX_INDENT = 3
MATH_BLOCK_DELIMITER = "$$"
MATH_BLOCK_PATTERN = re.compile(r"^[ \t]{0,3}\$\$")
ATX_HEADING_PATTERN = re.compile(r"^[ \t]{0,3}#{1,6}(?:[ \t]|$)")
THEMATIC_BREAK_PATTERN = re.compile(r"^[ \t]{0,3}(?:(?:\*[ \t]*){3,}|(?:-[ \t]*){3,}|(?:_[ \t]*){3,})$")
TABLE_ROW_PATTERN = re.compile(r"^[ \t]{0,3}\|")
LIST_ITEM_PATTERN = re.compile(r"^[ \t]*(?:[-*+]|\d{1,9}[.)])(?:[ \t]|$)")
PARTIAL_LIST_ITEM_PATTERN = re.compile(r"^[ \t]*(?:[-*+]|\d{1,9}[.)]?)$")
LINE_PATTERN = re.compile(r"[^\n]*\n|[^\n]+")
LINE_PREFIX_PATTERN = re.compile(r"[ \t>]*")

# Indentation thresholds
INDENTED_CODE_COLUMNS = 4
LIST_CONTINUATION_COLUMNS = 2

# Block-level HTML containers whose content may span blank lines
HTML_CONTAINER_TAGS = frozenset(
    {
        "address",
        "article",
        "aside",
        "blockquote",
        "center",
        "details",
        "dialog",
        "div",
        "dl",
        "fieldset",
        "figure",
        "footer",
        "form",
        "header",
        "main",
        "nav",
        "ol",
        "pre",
        "script",
        "section",
        "style",
        "table",
        "textarea",
        "ul",
    }
)
HTML_OPEN_LINE_PATTERN = re.compile(r"^[ \t]{0,3}<(?P<tag>[A-Za-z][A-Za-z0-9-]*)(?=[\s/>]|$)")
HTML_TAG_TEMPLATE = r"<(?P<closing>/?){tag}(?=[\s/>]|$)(?P<attrs>[^<>]*?)(?P<self>/?)>"

# Autolinks: <scheme:...>
AUTOLINK_SCHEME_PATTERN = re.compile(r"<(?P<scheme>[A-Za-z][A-Za-z0-9+.\-]{1,31}):")
DEFAULT_AUTOLINK_SCHEMES = (
    "http",
    "https",
    "mailto",
    "ftp",
    "ftps",
    "tel",
    "sms",
    "irc",
    "ircs",
    "ws",
    "wss",
    "file",
    "data",
)

# HTML container handling
HTML_RAW_POLICIES = ("always", "blank-lines", "never")
DEFAULT_HTML_RAW_POLICY = "blank-lines"

# Limits
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
