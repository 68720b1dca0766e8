"""
Prompt templates and helpers for the chat pipeline.
Each structured prompt asks for bare JSON; app.services.chat tolerates it arriving wrapped or broken.
"""

from app.services.formulate import ProfileLike, as_profile_dict, interests_of

NOT_SPECIFIED = "Not specified"


def _list_or_text(value) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value if v) or NOT_SPECIFIED
    return str(value) if value else NOT_SPECIFIED


def user_context(profile: ProfileLike) -> str:
    """Render the profile block shared by every system prompt; empty when there is no profile."""
    p = as_profile_dict(profile)
    if not p:
        return ""
    return (
        "USER PROFILE:\n"
        f"- Name: {p.get('name') or 'Student'}\n"
        f"- Class Year: {p.get('graduation_year') or NOT_SPECIFIED}\n"
        f"- Major: {p.get('major') or NOT_SPECIFIED}\n"
        f"- Career Interests: {interests_of(p) or NOT_SPECIFIED}\n"
        f"- Skills: {_list_or_text(p.get('skills'))}\n"
        f"- Location Preference: {_list_or_text(p.get('preferred_locations') or p.get('location'))}\n"
    )


IMMEDIATE_SYSTEM = (
    "You are Milo, an opportunity scout for Yale students. "
    "Reply with ONE direct sentence (under 15 words) that shows you understood the request "
    "and are pulling opportunities and Yale alumni connections.\n\n{context}"
)

INTENT_SYSTEM = (
    "You are Milo, a discovery engine for Yale students looking for jobs, internships and alumni intros.\n\n"
    "{context}\n"
    "Parse the user's intent and return ONLY a JSON object:\n"
    '{{"thinking_message": "what the user is looking for", '
    '"search_focus": "jobs | internships | alumni | research", '
    '"key_terms": ["term1", "term2"]}}'
)

PATHWAYS_SYSTEM = (
    "You are Milo's company discovery system. Return 5-6 companies relevant to the user's request.\n\n"
    "{context}\n"
    "Return ONLY a JSON array:\n"
    '[{{"name": "Company", "domain": "company.com", "relevance": 8, '
    '"description": "why it is relevant"}}]\n'
    "relevance is a number from 0 to 10."
)

ALUMNI_QUERY_SYSTEM = (
    "You write semantic search queries over a Yale alumni index. "
    "Find alumni in relevant roles and industries who could offer advice or introductions.\n\n"
    "{context}\n"
    "Return ONLY a JSON object:\n"
    '{{"search_query": "semantic search query", "search_focus": "what we are looking for"}}'
)

ONBOARDING_SYSTEM = (
    "You are Milo's onboarding assistant. Step {step} of {total_steps}.\n"
    "Acknowledge the student's answer warmly in 1-2 sentences, use their name if given, "
    "and build excitement about what comes next."
)

DEFAULT_THINKING = "Analyzing your request..."
ONBOARDING_FALLBACK = "Got it! Let's continue..."


def render_system(template: str, profile: ProfileLike) -> str:
    return template.format(context=user_context(profile)).strip()


def build_onboarding_prompt(question: str, answer: str) -> str:
    """Render the user message for one onboarding answer."""
    return f'Question: "{question.strip()}"\nAnswer: "{answer.strip()}"'


PROFILE_ANALYSIS_SYSTEM = (
    "You are an expert career advisor specializing in alumni networking for Yale students. "
    "Provide specific, actionable advice for building professional relationships."
)

COMPANY_ANALYSIS_SYSTEM = (
    "You are an expert career advisor specializing in company analysis and alumni networking "
    "strategies for Yale students. Provide specific, actionable insights."
)

ABOUT_CHARS = 200


def _experience_line(idx: int, exp: dict) -> str:
    return f"{idx}. {exp.get('title')} at {exp.get('company')} ({exp.get('start_date')} - {exp.get('end_date')})"


def build_profile_analysis_prompt(alumni: dict) -> str:
    """User message asking for networking advice about one alumnus, answered as a JSON object."""
    experiences = alumni.get("experiences") or []
    education = ", ".join(
        f"{e.get('degree')} in {e.get('field')}" for e in alumni.get("education") or []
    ) or NOT_SPECIFIED
    about = str(alumni.get("about") or "")
    about = about[:ABOUT_CHARS] + "..." if about else "No bio available"
    trajectory = "\n".join(_experience_line(i, e) for i, e in enumerate(experiences, 1))
    return (
        "Analyze this Yale alumni profile and provide actionable networking insights.\n\n"
        "ALUMNI PROFILE:\n"
        f"- Name: {alumni.get('name')}\n"
        f"- Current Role: {alumni.get('current_title')} at {alumni.get('current_company')}\n"
        f"- Location: {alumni.get('location')}\n"
        f"- LinkedIn Connections: {alumni.get('connections')}\n"
        f"- Yale Connection: {alumni.get('yale_connection')}\n"
        f"- Career Experiences: {len(experiences)} roles\n"
        f"- Education: {education}\n"
        f"- About: {about}\n\n"
        f"CAREER TRAJECTORY:\n{trajectory}\n\n"
        "Return ONLY a JSON object with these fields:\n"
        '{"networking_strategy": "2-3 sentences", "career_advice": "2-3 sentences", '
        '"connection_approach": "1-2 sentences", "key_questions": ["q1", "q2", "q3", "q4"], '
        '"referral_potential": "high | medium | low", "value_proposition": "1 sentence"}'
    )


def build_company_analysis_prompt(company: str, alumni: list, paths: list) -> str:
    """User message asking for a read on one company's Yale alumni network."""
    people = "\n".join(
        f"{i}. {a.get('name')} - {a.get('current_title')} "
        f"({a.get('connections')} connections, {a.get('yale_connection')})"
        for i, a in enumerate(alumni, 1)
    )
    return (
        "Analyze this company's Yale alumni network.\n\n"
        f"COMPANY: {company}\n"
        f"ALUMNI COUNT: {len(alumni)}\n\n"
        f"ALUMNI PROFILES:\n{people}\n\n"
        f"CAREER PATHS TO {company.upper()}:\n" + "\n".join(paths) + "\n\n"
        "Return ONLY a JSON object with these fields:\n"
        '{"networking_opportunities": "2-3 sentences", "common_paths": ["path1", "path2"], '
        '"hiring_patterns": "2-3 sentences", "referral_strategy": "2-3 sentences", '
        '"key_contacts": ["name1", "name2"]}'
    )
