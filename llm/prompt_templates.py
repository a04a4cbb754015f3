"""
Prompt Templates for the Nester property chat assistant.

Builds the system prompt from property, agent and brand persona details,
and the user prompt from recent conversation history.
"""

from typing import Any, Dict, List, Optional


class PromptTemplates:
    """
    Manages prompt templates for the property chat assistant.

    Templates are designed for a single-listing buyer conversation with a
    lead qualification focus.
    """

    SYSTEM_TEMPLATE = """You are an AI-powered real estate assistant for {company}. You represent {agent_name} and are helping potential buyers learn about a specific property.

PROPERTY DETAILS:
- Address: {address}
- Price: {price}
- {bedrooms} bedrooms, {bathrooms} bathrooms
- {square_feet} sq ft
- Type: {property_type}
- Year Built: {year_built}
- Description: {description}
- Features: {features}
- Neighborhood: {neighborhood_info}

BRAND PERSONA:
- Tone: {tone}
- Style: {style}
- Use these phrases: {key_phrases}
- Avoid these phrases: {avoid_phrases}

YOUR ROLE:
1. Answer questions about the property professionally and accurately
2. Identify buyer interests and qualification signals
3. Guide conversations toward scheduling viewings or contacting the agent
4. Provide helpful neighborhood and market insights
5. Qualify leads by understanding their needs, timeline, and budget

LEAD QUALIFICATION SIGNALS TO IDENTIFY:
- Budget range mentions
- Timeline for buying/moving
- Current living situation
- Family size and needs
- Financing status
- Specific requirements or preferences
- Work location and commute needs

RESPOND WITH:
- Helpful, accurate information about the property
- Follow-up questions to better understand their needs
- Suggestions for next steps (viewing, contacting agent, etc.)
- Professional but friendly tone matching the brand persona"""

    USER_TEMPLATE = """CONVERSATION HISTORY:
{history}

Current message: {message}

Please respond naturally and helpfully. Also identify any lead qualification signals in this message."""

    @staticmethod
    def _format_price(price: Optional[float]) -> str:
        if price is None:
            return "Price on request"
        return f"${price:,.0f}"

    @staticmethod
    def _value(value: Any) -> Any:
        return "N/A" if value is None else value

    @classmethod
    def build_system_prompt(
        cls,
        property_info: Dict[str, Any],
        agent: Dict[str, Any],
        persona: Dict[str, Any],
    ) -> str:
        """
        Build the assistant's system prompt.

        Args:
            property_info: Property fields (address, price, bedrooms, ...)
            agent: Agent profile (name, company, ...)
            persona: Brand persona (tone, style, key_phrases, avoid_phrases)

        Returns:
            Formatted system prompt
        """
        v = cls._value
        return cls.SYSTEM_TEMPLATE.format(
            company=agent.get("company"),
            agent_name=agent.get("name"),
            address=v(property_info.get("address")),
            price=cls._format_price(property_info.get("price")),
            bedrooms=v(property_info.get("bedrooms")),
            bathrooms=v(property_info.get("bathrooms")),
            square_feet=v(property_info.get("square_feet")),
            property_type=v(property_info.get("property_type")),
            year_built=v(property_info.get("year_built")),
            description=v(property_info.get("description")),
            features=", ".join(property_info.get("features") or []),
            neighborhood_info=v(property_info.get("neighborhood_info")),
            tone=persona.get("tone"),
            style=persona.get("style"),
            key_phrases=", ".join(persona.get("key_phrases") or []),
            avoid_phrases=", ".join(persona.get("avoid_phrases") or []),
        )

    @staticmethod
    def format_history(history: List[Dict[str, Any]], window: int = 10) -> str:
        """Render the last `window` turns as Human/Assistant exchanges."""
        recent = history[-window:] if window > 0 else []
        return "\n\n".join(
            f"Human: {turn.get('user_message', '')}\nAssistant: {turn.get('ai_response', '')}"
            for turn in recent
        )

    @classmethod
    def build_user_prompt(
        cls,
        message: str,
        history: List[Dict[str, Any]],
        window: int = 10,
    ) -> str:
        """Build the user prompt with recent history and the current message."""
        return cls.USER_TEMPLATE.format(
            history=cls.format_history(history, window),
            message=message,
        )
