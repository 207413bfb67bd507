import google.generativeai as genai
from openai import AsyncOpenAI
import anthropic
from takemeto75.config import settings
import logging

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a travel advisor. Reply with a single JSON object and no other text."

OPENAI_MODEL = "gpt-4o-mini"
GEMINI_MODEL = "gemini-1.5-flash"
ANTHROPIC_MODEL = "claude-sonnet-4-5-20250929"
MAX_TOKENS = 500

# Initialize Clients
gemini_model = None
openai_client = None
anthropic_client = None

def init_ai():
    global gemini_model, openai_client, anthropic_client

    # 1. Gemini Init
    if settings.GOOGLE_API_KEY:
        try:
            genai.configure(api_key=settings.GOOGLE_API_KEY)
            gemini_model = genai.GenerativeModel(GEMINI_MODEL, system_instruction=SYSTEM_PROMPT)
        except Exception as e:
            logger.warning(f"Gemini Init Warning: {e}")

    # 2. OpenAI Init
    if settings.OPENAI_API_KEY:
        try:
            openai_client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
        except Exception as e:
            logger.warning(f"OpenAI Init Warning: {e}")

    # 3. Anthropic Init
    if settings.ANTHROPIC_API_KEY:
        try:
            anthropic_client = anthropic.AsyncAnthropic(api_key=settings.ANTHROPIC_API_KEY)
        except Exception as e:
            logger.warning(f"Anthropic Init Warning: {e}")

# Call init on module load
init_ai()

def provider() -> str:
    return settings.AI_PROVIDER.lower()

def has_credentials() -> bool:
    """True when the configured provider has a usable client."""
    name = provider()
    if name == "openai":
        return openai_client is not None
    if name == "gemini":
        return gemini_model is not None
    return anthropic_client is not None

async def complete_with_openai(prompt: str) -> str:
    if not openai_client:
        raise RuntimeError("OpenAI API Key missing.")
    response = await openai_client.chat.completions.create(
        model=OPENAI_MODEL,
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt}
        ],
        max_tokens=MAX_TOKENS,
        temperature=0,
    )
    return response.choices[0].message.content or ""

async def complete_with_gemini(prompt: str) -> str:
    if not gemini_model:
        raise RuntimeError("Gemini API Key missing.")
    response = await gemini_model.generate_content_async(prompt)
    return response.text

async def complete_with_anthropic(prompt: str) -> str:
    if not anthropic_client:
        raise RuntimeError("Anthropic API Key missing.")
    response = await anthropic_client.messages.create(
        model=ANTHROPIC_MODEL,
        max_tokens=MAX_TOKENS,
        temperature=0,
        system=SYSTEM_PROMPT,
        messages=[{"role": "user", "content": prompt}],
    )
    return "".join(block.text for block in response.content if block.type == "text")

async def complete(prompt: str) -> str:
    """
    Send a prompt to the configured provider and return the raw reply text.
    Provider errors propagate to the caller.
    """
    name = provider()
    logger.info(f"Advisor request via {name} ({len(prompt)} chars)")

    if name == "openai":
        return await complete_with_openai(prompt)
    if name == "gemini":
        return await complete_with_gemini(prompt)
    return await complete_with_anthropic(prompt)
