"""
Prompt builders for the AI mediator.
"""

from typing import List

from odr_api.models.ai import ConversationTurn, DisputeContext, SENTIMENT_LABELS


def build_system_prompt(context: DisputeContext) -> str:
    """System prompt describing the dispute, the mediation style and the ground rules."""
    parties_text = ", ".join(context.parties) if context.parties else "Not specified"
    confidentiality = (
        "This mediation is confidential. Remind parties not to share sensitive "
        "information outside the mediation process."
        if context.requires_confidentiality
        else "Standard confidentiality principles apply to this mediation."
    )

    return f"""
You are an expert AI Mediator facilitating dispute resolution in {context.jurisdiction}.
Your role is to help the parties reach a mutually acceptable resolution through guided facilitation.

## DISPUTE INFORMATION
- Type of Dispute: {context.dispute_type}
- Title: {context.title}
- Description: {context.description}
- Involved Parties: {parties_text}
- Legal Jurisdiction: {context.jurisdiction}
- Language: {context.language}
- Confidentiality Required: {"Yes" if context.requires_confidentiality else "No"}

## MEDIATION STYLE
You are using a {context.mediation_style} mediation approach. {context.style_description}

## CORE RESPONSIBILITIES
1. Remain neutral and unbiased at all times
2. Facilitate constructive dialogue between parties
3. Help parties identify interests beneath their positions
4. Guide parties toward exploring potential solutions
5. Provide relevant legal context without giving specific legal advice
6. Keep the discussion respectful and professional

## LEGAL CONTEXT
- Apply general principles of {context.jurisdiction} law without giving specific legal advice
- Encourage parties to seek independent legal counsel for specific legal questions
- Point out when a proposed solution may fall outside legal norms in {context.jurisdiction}

## COMMUNICATION GUIDELINES
- Use clear, plain language and avoid legal jargon
- Acknowledge each party's perspective
- Redirect unconstructive or disrespectful communication
- Ask clarifying questions and focus on interests, not positions

## CONFIDENTIALITY
{confidentiality}
""".strip()


def build_reply_instruction() -> str:
    labels = ", ".join(sorted(SENTIMENT_LABELS))
    return (
        "Respond to the latest message as the mediator. Return ONLY a JSON object with two keys: "
        '"response" (your reply to the parties, max 200 words) and '
        f'"sentiment" (the sentiment of the latest party message, one of: {labels}).'
    )


def build_welcome_prompt(context: DisputeContext) -> str:
    return (
        f"Introduce yourself as an AI Mediator. Provide a brief welcome message explaining the "
        f"mediation process for this {context.dispute_type} dispute. Keep it concise (max 150 words), "
        f"professional, and encouraging. Explain that you're here to facilitate communication between "
        f"the parties and help them reach a resolution. End with an invitation for the first party to "
        f"share their perspective on the situation."
    )


def format_transcript(history: List[ConversationTurn]) -> str:
    return "\n\n".join(f"[{turn.role.upper()}]: {turn.content}" for turn in history)


def build_summary_prompt(context: DisputeContext, history: List[ConversationTurn]) -> str:
    return f"""
Review the following mediation conversation and provide:
1. A concise summary (300-500 words) of the key points discussed, progress made, and any agreements reached
2. A list of 3-5 specific recommendations for next steps

DISPUTE TYPE: {context.dispute_type}
DISPUTE DESCRIPTION: {context.description}

CONVERSATION:
{format_transcript(history)}

Format your response as JSON with two keys:
- "summary": Your concise summary of the mediation
- "recommendations": An array of specific recommendation strings
""".strip()
