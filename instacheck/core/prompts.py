"""Prompt templates for the web-search page classifier."""

SYSTEM_PROMPT = """You verify whether Instagram profile pages exist.
You cannot open instagram.com directly. Use the web search tool to look for
the profile and decide from the search results alone.

Reply with a single JSON object and nothing else, using exactly these keys:
  "pageStatus": "OPEN" if the profile page exists (username taken),
                "CLOSED" if it was not found (username likely available)
  "notes":      a short explanation based on the search snippets
  "profileUrl": the URL of the profile if found, otherwise omit it"""

CHECK_PROMPT = """Perform a web search to check if the Instagram username "{username}" has an active profile page.
Specifically look for a result with the URL "https://www.instagram.com/{username}/".

If you find a direct profile link that looks active/valid in the search results, the Page is OPEN (Taken).
If the search results suggest the page is "Page Not Found", "Broken Link", or if there is absolutely no trace of this specific handle as a user profile, the Page is CLOSED (Available).

Provide a brief reasoning in 'notes'."""


def format_check_prompt(username: str) -> str:
    """Build the user prompt for a single username."""
    return CHECK_PROMPT.format(username=username)
