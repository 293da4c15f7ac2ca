# generation backends that return json constrained to a pydantic schema
import requests
import logging
from typing import Optional, Type

from pydantic import BaseModel
from google import genai
from google.genai import types

from .settings import StudyLensSettings

logger = logging.getLogger(__name__)


class LLMServiceError(RuntimeError):
    """Raised when a generation backend fails or is unreachable"""


# service for interacting with ollama llm api
class OllamaLLMService:
    """Local LLM service using Ollama structured outputs"""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llama3",
        temperature: float = 0.3,
        timeout: int = 120,
        session: Optional[requests.Session] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self.session = session or requests.Session()

    # verify ollama server is running and model is available
    def check_availability(self):
        """Check if Ollama is running and model is available"""
        try:
            response = self.session.get(f"{self.base_url}/api/tags", timeout=5)
        except requests.exceptions.ConnectionError:
            raise LLMServiceError(
                "Cannot connect to Ollama. Please install and start it:\n"
                "1. Install Ollama: https://ollama.ai/\n"
                "2. Start Ollama: ollama serve\n"
                f"3. Pull model: ollama pull {self.model}"
            )

        if response.status_code != 200:
            raise LLMServiceError("Ollama is not running. Please start it with: ollama serve")

        # check if the requested model is installed
        model_names = [model["name"] for model in response.json().get("models", [])]
        if not any(self.model in name for name in model_names):
            logger.warning(f"Model {self.model} not found. Available models: {model_names}")
            raise LLMServiceError(f"Model {self.model} not available. Run: ollama pull {self.model}")

        logger.info(f"✓ Ollama is running with model: {self.model}")

    # generate json text constrained to the schema
    def complete(self, prompt: str, schema: Type[BaseModel], system_instruction: Optional[str] = None) -> str:
        """Generate a JSON response matching schema"""
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "format": schema.model_json_schema(),
            "options": {
                "temperature": self.temperature,
                "top_p": 0.9,
                "top_k": 40
            }
        }
        if system_instruction:
            payload["system"] = system_instruction

        try:
            response = self.session.post(
                f"{self.base_url}/api/generate",
                json=payload,
                timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            raise LLMServiceError("Request timed out. The model might be too slow or overloaded.")
        except requests.exceptions.RequestException as e:
            raise LLMServiceError(f"Ollama request failed: {e}")

        if response.status_code != 200:
            raise LLMServiceError(f"Ollama API error: {response.status_code} - {response.text}")

        return response.json().get("response", "").strip()

    # test if ollama connection is working
    def test_connection(self) -> bool:
        """Test if the LLM service is working"""
        try:
            self.check_availability()
            return True
        except LLMServiceError as e:
            logger.error(f"✗ LLM test failed: {str(e)}")
            return False


# service for the hosted gemini api
class GeminiLLMService:
    """Google Gemini with JSON response schemas"""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        temperature: float = 0.3,
        timeout: int = 120,
        client: Optional[genai.Client] = None
    ):
        if client is None and not api_key:
            raise ValueError("A Gemini API key is required (set STUDYLENS_GEMINI_API_KEY)")
        self.model = model
        self.temperature = temperature
        self.client = client or genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=timeout * 1000)  # milliseconds
        )

    def complete(self, prompt: str, schema: Type[BaseModel], system_instruction: Optional[str] = None) -> str:
        """Generate a JSON response matching schema"""
        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=self.temperature,
            response_mime_type="application/json",
            response_schema=schema,
        )
        response = self.client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=config,
        )
        return (response.text or "").strip()

    def test_connection(self) -> bool:
        """Test if the LLM service is working"""
        try:
            self.client.models.get(model=self.model)
            logger.info(f"✓ Gemini model available: {self.model}")
            return True
        except Exception as e:
            logger.error(f"✗ LLM test failed: {str(e)}")
            return False


# build the backend named in settings
def create_llm_service(settings: StudyLensSettings):
    """Create the generation service for the configured provider"""
    if settings.llm_provider == "gemini":
        return GeminiLLMService(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            temperature=settings.temperature,
            timeout=settings.request_timeout
        )
    return OllamaLLMService(
        base_url=settings.ollama_base_url,
        model=settings.ollama_model,
        temperature=settings.temperature,
        timeout=settings.request_timeout
    )
