from __future__ import annotations
from typing import Any, Dict, List, Optional

try:
    from .providers.types import DEFAULT_CREATIVITY, PromptRequest
except ImportError:
    from providers.types import DEFAULT_CREATIVITY, PromptRequest

FREEFORM_MAX_TOKENS = 800
TOOL_MAX_TOKENS = 300
DEFAULT_LANGUAGE = "English"

TOOL_TEMPLATES: Dict[str, str] = {
    "rephrase": (
        "Rephrase the following text so it reads clearly and professionally. "
        "Keep the original meaning. Reply with the rewritten text only.\n\n"
        "Text:\n{text}"
    ),
    "translate": (
        "Translate the following text into {language}. "
        "Reply with the translation only.\n\n"
        "Text:\n{text}"
    ),
    "hashtags": (
        "Extract 5 to 10 relevant hashtags from the following text. "
        "Reply with the hashtags only, separated by spaces.\n\n"
        "Text:\n{text}"
    ),
    "shorten": (
        "Shorten the following text to about half its length while keeping the key message. "
        "Reply with the shortened text only.\n\n"
        "Text:\n{text}"
    ),
}

TOOL_ALIASES = {
    "extract-hashtags": "hashtags",
    "extract_hashtags": "hashtags",
    "hashtag": "hashtags",
    "summarize": "shorten",
    "rewrite": "rephrase",
}

# answered locally, never sent to a provider
LOCAL_TOOLS = ("calculate",)

TEMPLATE_HINTS: Dict[str, Optional[str]] = {
    "default": None,
    "social-post": "Write it as a social media post.",
    "ad": "Write it as a short advertisement ending with a call to action.",
    "email": "Write it as a marketing email, starting with a subject line.",
    "product-description": "Write it as a product description for an online store.",
    "slogan": "Suggest three short, catchy slogans.",
}

LENGTH_HINTS = {
    "short": "Keep it under 60 words.",
    "medium": "Aim for about 120 words.",
    "long": "Use up to 250 words.",
}


def normalize_tool(tool: Optional[str]) -> Optional[str]:
    """Canonical tool name, ``None`` for free-form; raises ValueError on unknown tools."""
    if tool is None:
        return None
    name = str(tool).strip().lower()
    if not name or name in ("none", "generate"):
        return None
    name = TOOL_ALIASES.get(name, name)
    if name not in TOOL_TEMPLATES and name not in LOCAL_TOOLS:
        raise ValueError(f"Unknown tool: {tool}")
    return name


def parse_creativity(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return DEFAULT_CREATIVITY
    try:
        v = float(value)
    except (TypeError, ValueError):
        return DEFAULT_CREATIVITY
    if v != v:  # NaN
        return DEFAULT_CREATIVITY
    return int(round(min(100.0, max(0.0, v))))


def build_tool_prompt(tool: str, text: str, language: Optional[str] = None) -> str:
    name = normalize_tool(tool)
    if name is None or name not in TOOL_TEMPLATES:
        raise ValueError(f"No prompt template for tool: {tool}")
    return TOOL_TEMPLATES[name].format(text=text.strip(), language=(language or DEFAULT_LANGUAGE).strip())


def build_hint_prompt(
    prompt: str,
    *,
    template: Optional[str] = None,
    tone: Optional[str] = None,
    length: Optional[str] = None,
    business_type: Optional[str] = None,
) -> str:
    """Prefix the prompt with one instruction block built from the hints.

    With no usable hints the raw prompt is returned untouched.
    """
    lines: List[str] = []
    if business_type and business_type.strip():
        lines.append(f"- Business type: {business_type.strip()}")
    if tone and tone.strip():
        lines.append(f"- Tone: {tone.strip()}")
    if template and template.strip():
        key = template.strip().lower()
        hint = TEMPLATE_HINTS[key] if key in TEMPLATE_HINTS else f"Use this format: {template.strip()}."
        if hint:
            lines.append(f"- Format: {hint}")
    if length and length.strip():
        key = length.strip().lower()
        lines.append(f"- Length: {LENGTH_HINTS.get(key, length.strip())}")
    if not lines:
        return prompt
    return "Instructions:\n" + "\n".join(lines) + f"\n\nRequest:\n{prompt}"


def build_prompt_request(
    prompt: str,
    *,
    tool: Optional[str] = None,
    language: Optional[str] = None,
    template: Optional[str] = None,
    tone: Optional[str] = None,
    length: Optional[str] = None,
    business_type: Optional[str] = None,
    creativity: Any = None,
    api_preference: Optional[str] = None,
) -> PromptRequest:
    tool_name = normalize_tool(tool)
    if tool_name in TOOL_TEMPLATES:
        text = build_tool_prompt(tool_name, prompt, language)
        max_tokens = TOOL_MAX_TOKENS
    else:
        text = build_hint_prompt(prompt, template=template, tone=tone, length=length, business_type=business_type)
        max_tokens = FREEFORM_MAX_TOKENS
    return PromptRequest(
        prompt=text,
        raw_prompt=prompt,
        creativity=parse_creativity(creativity),
        max_tokens=max_tokens,
        api_preference=api_preference,
        tool=tool_name,
        template=template,
        tone=tone,
        length=length,
        business_type=business_type,
    )
