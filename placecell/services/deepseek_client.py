"""
DeepSeek API Client

DeepSeek uses OpenAI-compatible API, so we use the openai library.

AI is used for two things only:
- reading a company's registration form into the six job-posting fields
- drafting outreach emails to a company's HR

Every AI output is validated before anything is written; the relational
store remains the source of truth for companies.
"""
import json
import logging

from openai import OpenAI

from placecell.core.config import get_settings
from placecell.core.errors import ExternalServiceError

logger = logging.getLogger(__name__)

settings = get_settings()

REGISTRATION_FIELDS = (
    "job_roles",
    "package_offered",
    "eligibility_criteria",
    "bond_details",
    "job_location",
    "selection_process",
)

# Forms can run to several pages; the useful part is near the top
MAX_FORM_CHARS = 12000


class DeepSeekClient:
    """
    Wrapper for DeepSeek API with task-specific methods.
    """

    def __init__(self):
        self.client = OpenAI(
            api_key=settings.deepseek_api_key,
            base_url=settings.deepseek_base_url
        )
        self.model = settings.deepseek_model

    def _call_api(self, system_prompt: str, user_content: str, max_tokens: int = 1000,
                  temperature: float = 0.1) -> str:
        """
        Internal method to call DeepSeek API.
        Returns raw text response.
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_content}
                ],
                max_tokens=max_tokens,
                temperature=temperature
            )
        except Exception as e:
            logger.error(f"DeepSeek request failed: {e}")
            raise ExternalServiceError(f"AI service error: {e}")
        return response.choices[0].message.content or ""

    def _extract_json(self, text: str) -> dict:
        """
        Extract JSON from API response.
        Handles cases where model wraps JSON in markdown code blocks.
        """
        text = text.strip()
        if text.startswith("```json"):
            text = text[7:]
        if text.startswith("```"):
            text = text[3:]
        if text.endswith("```"):
            text = text[:-3]

        return json.loads(text.strip())

    def extract_registration_fields(self, form_text: str) -> dict:
        """
        Read a registration form and return the job-posting fields as a dict.
        Missing fields come back as null.
        """
        system_prompt = """You read company campus-recruitment registration forms.
Extract the following and return ONLY valid JSON:
{
  "job_roles": "string or null",
  "package_offered": "string or null",
  "eligibility_criteria": "string or null",
  "bond_details": "string or null",
  "job_location": "string or null",
  "selection_process": "string or null"
}
Summarise each field in one or two lines. Use null when the form does not say.
Return ONLY the JSON, no explanation."""

        response = self._call_api(system_prompt, form_text[:MAX_FORM_CHARS], max_tokens=800)
        try:
            return self._extract_json(response)
        except json.JSONDecodeError as e:
            logger.error(f"Registration form extraction returned non-JSON output: {e}")
            raise ExternalServiceError("AI service returned an unreadable response")

    def generate_email(self, company_name: str, hr_name: str = None, purpose: str = None) -> dict:
        """
        Draft an email to a company's HR.

        Returns {"subject": ..., "body": ...}. When the model does not answer
        in JSON the whole reply is used as the body.
        """
        system_prompt = """You write short, professional emails from a university placement cell
to company HR contacts. Return ONLY valid JSON:
{"subject": "string", "body": "string"}
The body is plain text with line breaks, signed "Placement Cell"."""

        greeting = hr_name or "the HR team"
        user_content = (
            f"Company: {company_name}\n"
            f"Addressed to: {greeting}\n"
            f"Purpose: {purpose or 'Invite the company for campus recruitment'}"
        )
        response = self._call_api(system_prompt, user_content, max_tokens=700, temperature=0.7)
        try:
            draft = self._extract_json(response)
        except json.JSONDecodeError:
            draft = None

        if not isinstance(draft, dict) or not draft.get("body"):
            return {
                "subject": f"Campus Recruitment Invitation - {company_name}",
                "body": response.strip(),
            }
        return {
            "subject": str(draft.get("subject") or f"Campus Recruitment Invitation - {company_name}"),
            "body": str(draft["body"]),
        }

    def test_connection(self) -> bool:
        """Test if DeepSeek API is reachable"""
        try:
            response = self._call_api(
                "You are a test assistant.",
                "Reply with exactly: OK",
                max_tokens=10
            )
            return "OK" in response.upper()
        except ExternalServiceError:
            return False


# Singleton instance
_deepseek_client: DeepSeekClient = None


def get_deepseek_client() -> DeepSeekClient:
    """Get or create DeepSeek client (singleton pattern)"""
    global _deepseek_client
    if _deepseek_client is None:
        _deepseek_client = DeepSeekClient()
    return _deepseek_client
