"""Title extraction from the first <h1> of rendered markup"""

import re


H1_RE = re.compile(r'<h1[^>]*>([^<]*)</h1>')


def extract_title(markup: str, strip: bool = False) -> dict[str, str]:
    """Return {'title': ...} from the first <h1> found, or {} if there is none.

    With strip, the result also carries 'body': markup with that first <h1>
    element removed and surrounding whitespace trimmed. Later <h1> elements
    are left in place.
    """
    m = H1_RE.search(markup)
    if not m:
        return {}
    result = {"title": m.group(1)}
    if strip:
        result["body"] = (markup[:m.start()] + markup[m.end():]).strip()
    return result
