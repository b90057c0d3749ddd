import logging
import os
import re
from langchain_core.prompts import ChatPromptTemplate
from langchain_openai import ChatOpenAI
from langchain_google_genai import ChatGoogleGenerativeAI
from tenacity import retry, retry_if_not_exception_type, stop_after_attempt, wait_exponential
from .config import OPENAI_API_KEY, GOOGLE_API_KEY, MODEL_TYPE, MODEL_NAME, FALLBACK_MODEL_NAME, AI_MAX_ATTEMPTS
from .json_cleaner import heal_json
from .parser import decode, format_json, parse_json

logger = logging.getLogger(__name__)

PROVIDERS = ("gemini", "openai")

FIX_PROMPT = ChatPromptTemplate.from_template(
    "The following is malformed JSON. Please fix the syntax errors and return ONLY the valid JSON string.\n"
    "Do not wrap it in markdown code blocks. Do not add explanations.\n\n"
    "Malformed JSON:\n{json}"
)

TYPES_PROMPT = ChatPromptTemplate.from_template(
    "Analyze the following JSON object and generate accurate TypeScript interfaces or types to describe it.\n"
    "Use 'Root' as the main interface name.\n"
    "Return ONLY the TypeScript code. Do not wrap in markdown blocks.\n\n"
    "JSON:\n{json}"
)

_FENCE_OPEN = re.compile(r"^\s*```(?:json|typescript|ts)?[ \t]*\n?", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\n?```\s*$")


class AIServiceError(Exception):
    """The model could not be reached or gave no usable answer."""


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code block, if any."""
    text = _FENCE_OPEN.sub("", text, count=1)
    text = _FENCE_CLOSE.sub("", text, count=1)
    return text.strip()


def _api_key(model_type: str):
    # Read from environment first so the UI can override .env values
    if model_type == "openai":
        return os.getenv("OPENAI_API_KEY", OPENAI_API_KEY)
    return os.getenv("GOOGLE_API_KEY", GOOGLE_API_KEY)


def _default_model(model_type: str) -> str:
    return MODEL_NAME if model_type == MODEL_TYPE else FALLBACK_MODEL_NAME


def _build_llm(model_type: str, model_name: str):
    if model_type == "openai":
        return ChatOpenAI(model=model_name, api_key=_api_key("openai"))
    return ChatGoogleGenerativeAI(model=model_name, google_api_key=_api_key("gemini"))


def _content_text(content) -> str:
    # Some providers answer with a list of content parts
    if isinstance(content, list):
        return "".join(part if isinstance(part, str) else part.get("text", "") for part in content)
    return content or ""


@retry(
    stop=stop_after_attempt(AI_MAX_ATTEMPTS),
    wait=wait_exponential(multiplier=1, min=4, max=10),
    retry=retry_if_not_exception_type(AIServiceError),
    reraise=True,
)
async def _invoke(prompt: str, model_type: str, model_name: str) -> str:
    if not _api_key(model_type):
        raise AIServiceError(f"{model_type} API key not found. Please provide it in .env file or through UI.")
    llm = _build_llm(model_type, model_name)
    response = await llm.ainvoke(prompt)
    return _content_text(response.content)


async def generate_text(prompt: str, model_type: str = None, model_name: str = None) -> str:
    """Run a prompt on the configured provider, falling back to the other one."""
    model_type = model_type or MODEL_TYPE
    if model_type not in PROVIDERS:
        raise AIServiceError(f"Unknown model type: {model_type}")
    model_name = model_name or _default_model(model_type)

    try:
        return await _invoke(prompt, model_type, model_name)
    except Exception as e:
        fallback = next(p for p in PROVIDERS if p != model_type)
        if not _api_key(fallback):
            logger.exception("Model call failed on %s/%s", model_type, model_name)
            raise AIServiceError(f"Model call failed: {e}") from e
        logger.warning("Model call failed on %s/%s (%s), falling back to %s", model_type, model_name, e, fallback)

    try:
        return await _invoke(prompt, fallback, _default_model(fallback))
    except Exception as e:
        logger.exception("Fallback model call failed on %s", fallback)
        raise AIServiceError(f"Model call failed: {e}") from e


def _pretty(text: str, value) -> str:
    # Documents too deep to re-serialize are returned as they were
    try:
        return format_json(value)
    except ValueError:
        return text


async def fix_invalid_json(malformed_json: str) -> str:
    """
    Repair malformed JSON text.

    Valid input is only reformatted. Otherwise local cleanup is tried first,
    and the model is asked only when that fails.

    Args:
        malformed_json: Editor text that does not parse

    Returns:
        Replacement editor text

    Raises:
        AIServiceError: If the input is empty or the model call fails
    """
    if not malformed_json.strip():
        raise AIServiceError("Nothing to repair: input is empty")

    outcome = parse_json(malformed_json)
    if outcome.valid:
        return _pretty(malformed_json, outcome.data)

    try:
        healed = heal_json(malformed_json)
    except ValueError as e:
        logger.info("Local cleanup failed, asking the model: %s", e)
    else:
        logger.info("Repaired JSON locally without a model call")
        return _pretty(healed, decode(healed))

    answer = await generate_text(FIX_PROMPT.format(json=malformed_json))
    return strip_code_fences(answer) or "{}"


async def generate_type_interfaces(json_text: str) -> str:
    """
    Ask the model for TypeScript definitions describing ``json_text``.

    Raises:
        AIServiceError: If the input is empty, the call fails or nothing comes back
    """
    if not json_text.strip():
        raise AIServiceError("Nothing to describe: input is empty")

    answer = strip_code_fences(await generate_text(TYPES_PROMPT.format(json=json_text)))
    if not answer:
        raise AIServiceError("Model returned no type definitions")
    return answer
