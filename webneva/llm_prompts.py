from __future__ import annotations

from typing import Any, Dict, List

from webneva.models import GenerationRequest, OperationKind, TextRequest

DEFAULT_IMPROVE_INSTRUCTION = (
    "Improve the design, layout, typography, and responsiveness. Make it modern and professional."
)

_OUTPUT_RULE = (
    "Return ONLY the complete HTML document with <!DOCTYPE html>, <html>, <head>, and <body> tags. "
    "No explanations, no markdown, just pure HTML."
)

_IMPROVE_GUIDELINES = """IMPROVEMENT GUIDELINES:
1. Use modern, clean design with Tailwind CSS
2. Ensure full responsiveness for mobile, tablet, and desktop
3. Improve typography hierarchy and readability
4. Enhance color scheme and visual appeal
5. Maintain or improve accessibility (ARIA labels, semantic HTML)
6. Keep all existing functionality
7. Use modern CSS features and best practices
8. Ensure fast loading performance"""

_GENERATE_REQUIREMENTS = """WEBSITE REQUIREMENTS:
- Use modern, beautiful design with Tailwind CSS
- Fully responsive (mobile-first)
- Professional typography and spacing
- Appropriate color scheme
- Semantic HTML structure
- Accessible (ARIA labels, proper headings)
- Fast loading and performant
- Include a navigation header and footer
- Modern, engaging hero section if appropriate

IMPLEMENTATION:
- Use Tailwind CSS via CDN
- Include proper viewport meta tag
- Use semantic HTML5 elements
- Ensure good contrast ratios
- Add appropriate interactive states (hover, focus)
- Include meaningful placeholder content"""

_EXAMPLE_STRUCTURE = """Example structure:
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Page Title</title>
    <script src="https://cdn.tailwindcss.com"></script>
</head>
<body>
    <!-- Your beautiful, responsive website here -->
</body>
</html>"""

EXPLAIN_SYSTEM_MESSAGE = "Explain web code briefly and clearly as a bullet list."

REFINE_SYSTEM_MESSAGE = (
    "You turn rough website ideas into a clear, detailed brief for a web designer. "
    "Describe audience, tone, sections, calls to action and color direction in a short list. "
    "Return only the refined brief."
)


def _instruction(req: GenerationRequest) -> str:
    return (req.prompt_text or "").strip() or DEFAULT_IMPROVE_INSTRUCTION


def _transform_assets(req: GenerationRequest) -> str:
    # Transform may carry the page's separate stylesheet and script
    parts: List[str] = []
    css = req.options.get("css")
    js = req.options.get("js")
    if isinstance(css, str) and css.strip():
        parts.append(f"CURRENT CSS:\n{css}")
    if isinstance(js, str) and js.strip():
        parts.append(f"CURRENT JS:\n{js}")
    return "\n\n".join(parts)


def build_generation_prompt(req: GenerationRequest) -> str:
    """Full instruction text sent as the primary provider's `prompt`."""
    if req.kind in (OperationKind.IMPROVE, OperationKind.TRANSFORM):
        verb = "Improve" if req.kind == OperationKind.IMPROVE else "Transform"
        assets = _transform_assets(req)
        return (
            f"You are an expert web developer. {verb} the following HTML code based on the user's instructions.\n\n"
            f"USER INSTRUCTION: {_instruction(req)}\n\n"
            f"CURRENT HTML:\n{req.existing_document}\n\n"
            + (f"{assets}\n\n" if assets else "")
            + f"{_IMPROVE_GUIDELINES}\n\n"
            f"{_OUTPUT_RULE}"
        )
    return (
        "You are an expert web developer. Create a complete, professional website based on the user's description.\n\n"
        f"USER REQUEST: {req.prompt_text}\n\n"
        f"{_GENERATE_REQUIREMENTS}\n\n"
        f"{_OUTPUT_RULE}\n\n"
        f"{_EXAMPLE_STRUCTURE}"
    )


def chat_system_message(kind: OperationKind) -> str:
    if kind in (OperationKind.IMPROVE, OperationKind.TRANSFORM):
        focus = "improving existing websites"
    else:
        focus = "creating beautiful, responsive websites"
    return (
        f"You are an expert web developer specializing in {focus}. "
        "Return ONLY the complete HTML code with no explanations. "
        "Always include <!DOCTYPE html>, <html>, <head>, and <body> tags. Use Tailwind CSS for styling."
    )


def chat_user_message(req: GenerationRequest) -> str:
    if req.kind in (OperationKind.IMPROVE, OperationKind.TRANSFORM):
        assets = _transform_assets(req)
        return (
            f"Improve this HTML code:\n\n{req.existing_document}\n\n"
            + (f"{assets}\n\n" if assets else "")
            + f"Improvement instructions: {_instruction(req)}"
        )
    return req.prompt_text


def build_chat_messages(req: GenerationRequest) -> List[Dict[str, Any]]:
    return [
        {"role": "system", "content": chat_system_message(req.kind)},
        {"role": "user", "content": chat_user_message(req)},
    ]


def build_text_messages(req: TextRequest) -> List[Dict[str, Any]]:
    system = EXPLAIN_SYSTEM_MESSAGE if req.kind == OperationKind.EXPLAIN else REFINE_SYSTEM_MESSAGE
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": req.text},
    ]
