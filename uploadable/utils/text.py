import re
import unicodedata


def slugify(value: str, separator: str = "-") -> str:
    """
    Converts a string to a lowercase ASCII slug.

    Accents are stripped, runs of anything that is not a letter or a digit
    collapse into a single `separator`.
    """
    value = unicodedata.normalize("NFKD", str(value)).encode("ascii", "ignore").decode("ascii")
    value = re.sub(r"[^\w\s-]", "", value.lower())
    return re.sub(r"[-_\s]+", separator, value).strip("-_")
