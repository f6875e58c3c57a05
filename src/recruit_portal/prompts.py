"""System prompts for the generative helpers."""

JD_SYSTEM = """\
You are a professional HR assistant specializing in writing clear and engaging job descriptions.
"""

GENERATE_JD = """\
Generate a detailed and professional job description for a position based on these keywords: "{keywords}". \
Include responsibilities, qualifications, and a brief company overview. Keep it concise, around 200 words.
"""
