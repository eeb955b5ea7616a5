MIND_MAP_PROMPT = """Analyze this document text and extract key concepts to create a mind map structure.

Document content:
{document}

Return a JSON object with this exact structure:
{{
  "nodes": [
    {{
      "id": "1",
      "type": "default",
      "position": {{ "x": 0, "y": 0 }},
      "data": {{ "label": "Main Topic" }}
    }}
  ],
  "edges": [
    {{
      "id": "e1-2",
      "source": "1",
      "target": "2",
      "type": "smoothstep"
    }}
  ]
}}

Guidelines:
1. Create a central node for the main topic
2. Create child nodes for major concepts (positioned around the center)
3. Create connections showing relationships
4. Use clear, concise labels (2-5 words)
5. Position nodes in a radial layout around the center
6. Space nodes 200-300 pixels apart
7. Include 8-15 key concepts total

Return ONLY valid JSON, no other text."""

VERDICT_FORMAT = """Provide a JSON response with this structure:
{
  "verified": true/false,
  "explanation": "brief explanation of accuracy",
  "confidence": "high/medium/low"
}

Return ONLY valid JSON."""

SHORT_VERDICT_FORMAT = """Provide a JSON response:
{
  "verified": true/false,
  "explanation": "brief explanation",
  "confidence": "high/medium/low"
}

Return ONLY valid JSON."""

CORRECTION_INSTRUCTIONS = (
    "Provide a corrected, accurate version of this concept in 2-5 words. "
    "Return ONLY the improved text, nothing else."
)


def build_mind_map_prompt(text, max_chars):
    return MIND_MAP_PROMPT.format(document=text[:max_chars])


def format_references(sources, header="Reference information from reputable sources:"):
    """
    Renders sources as a numbered reference block (title, snippet, url).
    Returns an empty string when there is no evidence.
    """
    if not sources:
        return ""
    block = f"\n\n{header}\n"
    for idx, source in enumerate(sources, start=1):
        block += f"\n{idx}. {source.title}\n{source.snippet}\nSource: {source.url}\n"
    return block


def format_snippets(sources):
    if not sources:
        return ""
    block = "\n\nReference information:\n"
    for idx, source in enumerate(sources, start=1):
        block += f"\n{idx}. {source.snippet}\n"
    return block


def build_verification_prompt(content, sources):
    prompt = f'Verify the medical accuracy of this statement: "{content}"'
    prompt += format_references(sources)
    prompt += f"\n\n{VERDICT_FORMAT}"
    return prompt


def build_short_verification_prompt(content, sources):
    # Used right after a correction; only snippets are quoted back.
    prompt = f'Verify the medical accuracy of this statement: "{content}"'
    prompt += format_snippets(sources)
    prompt += f"\n\n{SHORT_VERDICT_FORMAT}"
    return prompt


def build_regeneration_prompt(content, sources):
    prompt = f'Improve and correct this medical concept: "{content}"'
    prompt += format_references(sources)
    prompt += f"\n\n{CORRECTION_INSTRUCTIONS}"
    return prompt
