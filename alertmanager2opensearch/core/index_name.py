from datetime import datetime


def build_index_name(template: str, when: datetime) -> str:
    """Fill the %y, %m and %d placeholders of an index template.

    Every occurrence is replaced; anything else in the template is kept as is,
    so a template without placeholders names a single fixed index.
    """
    name = template.replace("%y", f"{when.year:04d}")
    name = name.replace("%m", f"{when.month:02d}")
    name = name.replace("%d", f"{when.day:02d}")
    return name
