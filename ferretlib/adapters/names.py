"""Tag and attribute names as written in the source text.

``html.parser`` folds tag and attribute names to lower case before handing
them over, and BeautifulSoup's ``html.parser`` builder inherits that. Element
names are counted exactly as written, so both adapters re-read the raw start
tag and restore the original spelling here.
"""

import re
from typing import List, Optional, Sequence, Tuple

# Names we accept for tags and attribute keys. html.parser is lenient enough
# to hand over things like '"oops"' as an attribute key; those are fragments.
NAME_RE = re.compile(r'^[^\s"\'<>/=]+$')

# Same shapes html.parser accepts for a start tag name and its attributes
_START_TAG_RE = re.compile(r'<([^\t\n\r\f />\x00]+)')
_END_TAG_RE = re.compile(r'</\s*([^\t\n\r\f />\x00]+)')
_ATTRIBUTE_RE = re.compile(
    r'[\s/]*([^\s/>][^\s/=>]*)'
    r'(?:\s*=+\s*(?:\'[^\']*\'|"[^"]*"|(?![\'"])[^>\s]*))?'
)


def is_valid_name(name: Optional[str]) -> bool:
    return bool(name) and NAME_RE.match(name) is not None


def written_start_tag(text: str, pos: int = 0) -> Optional[Tuple[str, List[str]]]:
    """Read the tag name and attribute keys of the start tag at ``pos``.

    Returns:
        (tag name, attribute keys) in source order and spelling, or None if
        no start tag begins at ``pos``
    """
    match = _START_TAG_RE.match(text, pos)
    if match is None:
        return None
    keys = []
    pos = match.end()
    while True:
        attribute = _ATTRIBUTE_RE.match(text, pos)
        if attribute is None or attribute.end() == pos:
            break
        keys.append(attribute.group(1))
        pos = attribute.end()
    return match.group(1), keys


def written_end_tag(text: str, pos: int = 0) -> Optional[str]:
    """Tag name of the end tag at ``pos``, as written."""
    match = _END_TAG_RE.match(text, pos)
    return match.group(1) if match else None


def restore_names(folded_tag: str,
                  folded_keys: Sequence[str],
                  written: Optional[Tuple[str, List[str]]]) -> Tuple[str, List[str]]:
    """Map lower-cased parser names back to their written spelling.

    Keys are paired in order. A key with no written counterpart, or a tag
    whose written name does not fold to ``folded_tag``, keeps the parser's
    spelling.

    Example:
        >>> restore_names("item", ["code"], ("Item", ["Code"]))
        ('Item', ['Code'])
    """
    if written is None or written[0].lower() != folded_tag.lower():
        return folded_tag, list(folded_keys)

    tag, candidates = written
    restored = []
    start = 0
    for key in folded_keys:
        for i in range(start, len(candidates)):
            if candidates[i].lower() == key.lower():
                restored.append(candidates[i])
                start = i + 1
                break
        else:
            restored.append(key)
    return tag, restored
