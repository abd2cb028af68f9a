"""Coach messages: generated text with offline fallbacks."""
import logging
import random
from typing import Optional

from project50.schemas.progress import AiPersona, Progress
from project50.services import llm_service

logger = logging.getLogger(__name__)

PERSONA_PROMPTS: dict[AiPersona, str] = {
    AiPersona.sergeant: (
        "You are an aggressive, ex-military drill sergeant. Be harsh, direct, and "
        "demanding. Use tough love. No pity. Focus on suffering and hardness."
    ),
    AiPersona.stoic: (
        "You are a stoic philosopher like Marcus Aurelius or Seneca. Be calm, rational, "
        "and focus on duty, virtue, and controlling the mind. Use ancient wisdom."
    ),
    AiPersona.empathetic: (
        "You are a kind, supportive, and warm life coach. Be encouraging, understanding, "
        "and focus on self-care and gentle progress."
    ),
}

FALLBACK_MOTIVATIONS = [
    "Discipline is doing what you hate to do, but doing it like you love it.",
    "We must all suffer from one of two pains: the pain of discipline or the pain of regret.",
    "You cannot dream yourself into a character; you must hammer and forge yourself one.",
    "Success is the sum of small efforts, repeated day in and day out.",
    "Don't stop when you're tired. Stop when you're done.",
    "Your future is created by what you do today, not tomorrow.",
    "The only bad workout is the one that didn't happen.",
    "Focus on the process, not the outcome.",
    "Motivation gets you started. Habit keeps you going.",
    "Silence the noise. Do the work.",
]

FALLBACK_COACHING = [
    "I'm currently offline, but here is a timeless principle: consistency beats intensity. "
    "Focus on just checking off today's boxes.",
    "Network unavailable. My advice? Review your why. Read your manifesto aloud.",
    "Offline mode: use this time to disconnect and focus deeply. "
    "The best work happens in silence.",
    "I can't reach the cloud, but you don't need the cloud to be disciplined. Just execute.",
    "Connection lost. Stay the course. Don't let minor disruptions derail your progress.",
]


def persona_instruction(persona: AiPersona, custom_prompt: Optional[str] = None) -> str:
    if persona == AiPersona.custom and custom_prompt:
        return (
            f'You are a personalized coach. Your persona instructions are: "{custom_prompt}". '
            "Be consistent with this role."
        )
    return PERSONA_PROMPTS.get(persona, PERSONA_PROMPTS[AiPersona.stoic])


def get_offline_motivation() -> str:
    return random.choice(FALLBACK_MOTIVATIONS)


def get_offline_coaching() -> str:
    return random.choice(FALLBACK_COACHING)


def weekly_summary(progress: Progress) -> str:
    """Plain-text digest of the last seven days for the review prompt."""
    start = max(1, progress.current_day - 6)
    total = len(progress.custom_habits)
    lines = []
    for day in range(start, progress.current_day + 1):
        data = progress.history.get(day)
        if data is None:
            lines.append(f"Day {day}: No data.")
            continue
        mood = data.mood.value if data.mood else "N/A"
        frozen = "Yes" if data.frozen else "No"
        lines.append(
            f"Day {day}: Mood: {mood}, Completed: {len(data.completed_habits)}/{total}, "
            f"Frozen: {frozen}"
        )
    return "\n".join(lines)


async def daily_motivation(progress: Progress) -> str:
    prompt = (
        f"The user is on Day {progress.current_day} of {progress.total_days}.\n"
        "Give them a short, punchy motivational quote or advice for this stage.\n"
        "Keep it under 2 sentences. No emojis."
    )
    try:
        return await llm_service.generate_text(
            prompt,
            system=persona_instruction(progress.ai_persona, progress.custom_persona_prompt),
        )
    except Exception as exc:
        logger.warning("Motivation generation failed, using offline quote: %s", exc)
        return get_offline_motivation()


async def emergency_pep_talk(progress: Progress) -> str:
    prompt = (
        "The user is about to give up on their challenge today. "
        "Give them a short, intense pep talk in 3 sentences or fewer."
    )
    try:
        return await llm_service.generate_text(
            prompt,
            system=persona_instruction(progress.ai_persona, progress.custom_persona_prompt),
        )
    except Exception as exc:
        logger.warning("Pep talk generation failed, using offline coaching: %s", exc)
        return get_offline_coaching()


async def weekly_review(progress: Progress) -> str:
    start = max(1, progress.current_day - 6)
    prompt = (
        f"Analyze the user's performance over the last 7 days "
        f"(Day {start} to {progress.current_day}).\n\n"
        f"Data:\n{weekly_summary(progress)}\n\n"
        "Provide a weekly review with a consistency score out of 10, one key "
        "observation, and one actionable fix. Keep it concise."
    )
    try:
        return await llm_service.generate_text(prompt, temperature=0.4, max_tokens=500)
    except Exception as exc:
        logger.warning("Weekly review generation failed, using offline coaching: %s", exc)
        return get_offline_coaching()
