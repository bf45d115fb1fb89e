# /brandflow/flows/chatbot.py

from typing import Any, Dict, List

from brandflow.config.prompts import CHATBOT_DEFAULT_REPLY, CHATBOT_PERSONA
from brandflow.flows.base import CachedGenerationFlow
from brandflow.models.api import ChatbotInput, ChatMessage
from brandflow.models.domain import ChatbotReply
from brandflow.services.ai_service import GenerationParams
from brandflow.services.response_parser import PARSED_CONFIDENCE


def to_transcript(messages: List[ChatMessage]) -> str:
    """Folds system messages into the header and renders the rest as a labelled transcript."""
    system = "\n\n".join(m.content.strip() for m in messages if m.role == "system")

    header = CHATBOT_PERSONA
    if system:
        header = f"{header}\n\nSystem context:\n{system}"

    conversation = "\n".join(
        f"{'User' if m.role == 'user' else 'Assistant'}: {m.content.strip()}"
        for m in messages
        if m.role != "system"
    )
    return f"{header}\n\nConversation:\n{conversation}\n\nAssistant:"


class ChatbotFlow(CachedGenerationFlow[ChatbotInput]):
    """Free-text assistant reply. Never cached; the reply is the trimmed model text."""

    name = "chatbotFlow"
    input_model = ChatbotInput
    generation_params = GenerationParams(temperature=0.7, max_output_tokens=1024)

    def build_prompt(self, flow_input: ChatbotInput) -> str:
        return to_transcript(flow_input.messages)

    def parse_response(self, raw_text: str, flow_input: ChatbotInput) -> Dict[str, Any]:
        return ChatbotReply(
            reply=(raw_text or "").strip() or CHATBOT_DEFAULT_REPLY,
            confidence=PARSED_CONFIDENCE,
            generated_at=self.now_iso(),
        ).to_document()
