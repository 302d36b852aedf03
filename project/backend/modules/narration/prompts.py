"""
Prompt construction for narration module.
"""
import math
from typing import Optional

from shared.validation import is_positive_finite


def _format_duration_hint(video_duration: float, language_name: str) -> str:
    minutes = math.floor(video_duration / 60)
    seconds = math.floor(video_duration % 60)
    return (
        f"VIDEO DURATION: The video is {video_duration:.2f} seconds ({minutes}:{seconds:02d}) long. "
        f"Your narration should fit naturally within this duration. Write a transcript that, "
        f"when spoken naturally in {language_name}, lasts approximately {video_duration:.0f} seconds. "
        f"Pace the content accordingly, neither rushed nor dragging."
    )


def build_narration_prompt(
    goal: str,
    language_name: str = "English",
    video_duration: Optional[float] = None
) -> str:
    """
    Build the narrator instruction sent alongside the video.

    Args:
        goal: What the user wants the narration to explain
        language_name: Language the whole transcript must be written in
        video_duration: Video length in seconds; omitted from the prompt when unknown

    Returns:
        Prompt text asking for a JSON object with transcript and timestamps
    """
    duration_hint = ""
    if is_positive_finite(video_duration):
        duration_hint = "\n\n" + _format_duration_hint(video_duration, language_name)

    return f"""You are an expert video narrator. The user wants to explain: "{goal}"{duration_hint}

CRITICAL REQUIREMENTS:
1. Write the ENTIRE transcript in {language_name}
2. Every word, sentence and phrase must be in {language_name}
3. The transcript length should match the video duration when spoken
4. Output ONLY a JSON object with this exact structure:

{{
  "transcript": "Complete transcript in {language_name} without timestamps, ready for text-to-speech",
  "timestamps": [
    {{"time": "00:00", "text": "First sentence in {language_name}"}},
    {{"time": "00:05", "text": "Second sentence in {language_name}"}}
  ]
}}

Content requirements:
- "transcript": clean text in {language_name} WITHOUT timestamps
- "timestamps": array of objects with "time" (MM:SS) and "text" (one sentence each)
- Write as a professional product explainer focused on value and benefits
- Use the second person, in an engaging conversational tone
- Spread the timestamps evenly across the video

LANGUAGE: No English words unless they are proper nouns or technical terms commonly used in {language_name}.

Output ONLY the JSON object, nothing else."""


def build_frame_prompt(goal: str) -> str:
    """Instruction for describing one video frame in light of the user's goal."""
    return f"""You are analyzing a video frame to help create relevant narration. The user has specified their goal: "{goal}"

Your task:
1. Describe what is visible in this frame
2. Identify the elements relevant to the user's goal
3. Focus on details that support their communication objective
4. Give specific descriptions that help write the narration

Be specific about visual elements, actions, objects and settings that relate to their purpose."""
