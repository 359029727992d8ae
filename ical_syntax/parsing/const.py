"""Constants for ical parsing library."""

# Related to rfc5545 text parsing
FOLD_LEN = 75
FOLD_INDENT = " "
WSP = (" ", "\t")
CRLF = "\r\n"
ATTR_BEGIN = "BEGIN"
ATTR_END = "END"
ATTR_VALUE = "VALUE"
ATTR_TZID = "TZID"
ATTR_ENCODING = "ENCODING"
