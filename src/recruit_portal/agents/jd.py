"""JD Agent — drafts a job description from free-text keywords.

Pipeline position:
  job posting form keywords → THIS AGENT → description paragraph

Failures never block posting a job: they come back as a readable message
the poster can replace by hand.
"""

from __future__ import annotations

import logging

from recruit_portal.config import Config
from recruit_portal.llm import chat
from recruit_portal.prompts import GENERATE_JD, JD_SYSTEM

log = logging.getLogger(__name__)

EMPTY_RESPONSE = "Failed to generate job description. Please try again or write it manually."


def generate_job_description(cfg: Config, keywords: str) -> str:
    try:
        text = chat(
            cfg,
            system=JD_SYSTEM,
            messages=[{"role": "user", "content": GENERATE_JD.format(keywords=keywords)}],
            max_tokens=400,
            temperature=0.7,
        )
    except Exception as e:
        log.warning("Job description generation failed: %s", e)
        return f"Error: {e}. Please check your API key and network connection."

    text = text.strip()
    if not text:
        log.warning("LLM returned an empty job description")
        return EMPTY_RESPONSE
    return text
