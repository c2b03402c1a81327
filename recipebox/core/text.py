# recipebox/core/text.py
import re

_FENCE_RE = re.compile(r"```(?:json)?", flags=re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def extract_json(text: str) -> str:
    text = strip_code_fences(text)
    if (text.startswith("{") and text.endswith("}")) or (text.startswith("[") and text.endswith("]")):
        return text
    m = re.search(r"\{.*\}|\[.*\]", text, flags=re.DOTALL)
    if not m:
        raise ValueError("No JSON object found in model output")
    return m.group(0)
