"""
Resume Parser Service - rule-based field extraction from resume text.

Every extractor is best-effort: no match yields an empty string, never an
exception. Only an unreadable or unsupported document produces a failed
``ResumeParseResult``.
"""
import logging
import re
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from .document_text import UnsupportedDocumentError, extract_text, resolve_content_type

logger = logging.getLogger(__name__)


# ============================================================================
# Pydantic Schemas for Validated Output
# ============================================================================

class ExtractedCandidate(BaseModel):
    name: str = ""
    email: str = ""
    contact: str = ""
    linkedin: str = ""
    gender: str = ""
    skills: str = ""
    total_experience: str = ""
    education: str = ""
    current_company: str = ""
    current_location: str = ""


class ResumeParseResult(BaseModel):
    success: bool
    data: Optional[ExtractedCandidate] = None
    raw_text: str = ""
    message: Optional[str] = None


# ============================================================================
# Vocabularies
# ============================================================================

NAME_DENYLIST = re.compile(
    r"resume|curriculum|vitae|profile|summary|objective|experience|education|skills",
    re.IGNORECASE,
)

COMMON_SKILLS = [
    "JavaScript", "Java", "Python", "C++", "C#", "Ruby", "PHP", "Swift", "Kotlin", "Go",
    "React", "Angular", "Vue", "Node.js", "Express", "Django", "Flask", "Spring", "ASP.NET",
    "HTML", "CSS", "SASS", "TypeScript", "jQuery", "Bootstrap", "Tailwind",
    "MongoDB", "MySQL", "PostgreSQL", "Oracle", "SQL Server", "Redis", "Cassandra",
    "AWS", "Azure", "GCP", "Docker", "Kubernetes", "Jenkins", "Git", "CI/CD",
    "REST API", "GraphQL", "Microservices", "Agile", "Scrum", "JIRA",
    "Machine Learning", "AI", "Data Science", "TensorFlow", "PyTorch",
    "Salesforce", "SAP", "Oracle ERP", "Power BI", "Tableau",
    "Selenium", "JUnit", "Jest", "Mocha", "Cypress",
]

INDIAN_CITIES = [
    "Mumbai", "Delhi", "Bangalore", "Bengaluru", "Hyderabad", "Chennai", "Kolkata",
    "Pune", "Ahmedabad", "Jaipur", "Surat", "Lucknow", "Kanpur", "Nagpur",
    "Indore", "Thane", "Bhopal", "Visakhapatnam", "Pimpri", "Patna",
    "Vadodara", "Ghaziabad", "Ludhiana", "Agra", "Nashik", "Faridabad",
    "Meerut", "Rajkot", "Varanasi", "Srinagar", "Aurangabad", "Dhanbad",
    "Amritsar", "Navi Mumbai", "Allahabad", "Ranchi", "Howrah", "Coimbatore",
    "Jabalpur", "Gwalior", "Vijayawada", "Jodhpur", "Madurai", "Raipur",
    "Kota", "Chandigarh", "Guwahati", "Noida", "Gurugram", "Gurgaon",
]


def _skill_pattern(skill: str) -> "re.Pattern":
    # Two-letter terms (Go, AI) only match as written; lowercase "go" is prose.
    flags = 0 if len(skill) <= 2 else re.IGNORECASE
    return re.compile(r"(?<!\w)" + re.escape(skill) + r"(?!\w)", flags)


SKILL_PATTERNS = [(skill, _skill_pattern(skill)) for skill in COMMON_SKILLS]


def _degree(pattern: str) -> "re.Pattern":
    return re.compile(r"(?<!\w)(?:" + pattern + r")(?!\w)", re.IGNORECASE)


# Dotted "M.E" / "B.E" as written; bare "ME" / "BE" only when a subject
# follows, so headings such as "ABOUT ME" are not read as degrees
ENGINEERING_ABBREVIATION = r"(?-i:{letter}\.E\.?|{letter}E(?=\s+in\b|\s*\())"

# Highest qualification first
DEGREE_HIERARCHY = [
    (_degree(r"Ph\.?\s?D\.?|Doctorate"), "PhD"),
    (_degree(r"M\.?\s?Tech|Masters? of Technology"), "M.Tech"),
    (_degree(ENGINEERING_ABBREVIATION.format(letter="M") + r"|Masters? of Engineering"), "M.E"),
    (_degree(r"MBA|Masters? of Business Administration"), "MBA"),
    (_degree(r"MCA|Masters? of Computer Applications?"), "MCA"),
    (_degree(r"M\.?\s?Sc\.?|Masters? of Science"), "M.Sc"),
    (_degree(r"M\.?\s?Com\.?|Masters? of Commerce"), "M.Com"),
    (_degree(r"Master(?:'?s)?\s+(?:degree|of|in)"), "Master's Degree"),
    (_degree(r"B\.?\s?Tech|Bachelors? of Technology"), "B.Tech"),
    (_degree(ENGINEERING_ABBREVIATION.format(letter="B") + r"|Bachelors? of Engineering"), "B.E"),
    (_degree(r"BCA|Bachelors? of Computer Applications?"), "BCA"),
    (_degree(r"BBA|Bachelors? of Business Administration"), "BBA"),
    (_degree(r"B\.?\s?Sc\.?|Bachelors? of Science"), "B.Sc"),
    (_degree(r"B\.?\s?Com\.?|Bachelors? of Commerce"), "B.Com"),
    (_degree(r"Bachelor(?:'?s)?\s+(?:degree|of|in)"), "Bachelor's Degree"),
]

DEGREE_DELIMITERS = re.compile(r"[,|\-();]")
DEGREE_STOPWORDS = re.compile(
    r"\b(?:postgraduate|graduate|with|from|at|cgpa|percentage|score|marks|board|university|college|school|passed)\b"
    r"|\d+(?:\.\d+)?\s*%",
    re.IGNORECASE,
)
MAX_EDUCATION_LABEL = 40


# ============================================================================
# Contact fields
# ============================================================================

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

LINKEDIN_PATTERN = re.compile(
    r"(?:https?://)?(?:[a-z]{2,3}\.)?linkedin\.com/(?:in|pub|profile)/[a-zA-Z0-9_-]+/?",
    re.IGNORECASE,
)

PHONE_PATTERNS = [
    re.compile(r"(?<!\d)(?:\+?91[\s-]?)?[6-9]\d{4}[\s-]?\d{5}(?!\d)"),  # Indian mobile
    re.compile(r"\b\d{10}\b"),                          # bare 10 digits
    re.compile(r"\(\d{3}\)\s*\d{3}[-.\s]?\d{4}"),       # (123) 456-7890
]

EXPLICIT_GENDER = re.compile(r"(?:gender|sex)[\s:-]+(male|female|other)\b", re.IGNORECASE)
BARE_GENDER = re.compile(r"\b(male|female)\b", re.IGNORECASE)


def extract_name(lines: List[str]) -> str:
    """Name is usually the first 2-4 word, capitalised line that is not a heading."""
    for line in lines:
        trimmed = line.strip()
        if not (3 < len(trimmed) < 50) or not trimmed[0].isupper():
            continue
        words = trimmed.split()
        if 2 <= len(words) <= 4 and not NAME_DENYLIST.search(trimmed):
            return trimmed
    return ""


def extract_email(text: str) -> str:
    match = EMAIL_PATTERN.search(text)
    return match.group(0) if match else ""


def extract_linkedin(text: str) -> str:
    match = LINKEDIN_PATTERN.search(text)
    return match.group(0) if match else ""


def extract_phone(text: str) -> str:
    for pattern in PHONE_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        phone = re.sub(r"[\s()\-.]", "", match.group(0))
        if phone.startswith("+91"):
            phone = phone[3:]
        elif phone.startswith("91") and len(phone) == 12:
            phone = phone[2:]
        return phone
    return ""


def extract_gender(text: str) -> str:
    match = EXPLICIT_GENDER.search(text) or BARE_GENDER.search(text)
    if match:
        return match.group(1).lower().capitalize()
    return "Not Specified"


def extract_skills(text: str) -> str:
    """Vocabulary terms found in the text, in vocabulary order."""
    found = [skill for skill, pattern in SKILL_PATTERNS if pattern.search(text)]
    return ", ".join(found)


# ============================================================================
# Experience
# ============================================================================

EXPLICIT_EXPERIENCE_PATTERNS = [
    re.compile(
        r"(?:total|overall|cumulative)\s+(?:experience|exp)[\s:-]+(\d+\.?\d*)\+?\s*(?:years?|yrs?)",
        re.IGNORECASE,
    ),
    re.compile(
        r"(\d+\.?\d*)\+?\s*(?:years?|yrs?)(?:\s+of)?\s+(?:total|overall|cumulative)\s*(?:experience|exp)",
        re.IGNORECASE,
    ),
]

EXPERIENCE_HEADING = re.compile(
    r"^(?:(?:work)?experience|employment(?:history)?|professionalexperience|careerhistory)"
)
OTHER_HEADING = re.compile(
    r"^(?:education|academic|qualification|skill|project|certification|reference|personal"
    r"|hobby|hobbies|achievement|language|declaration|summary|objective|profile)"
)
MAX_HEADING_LENGTH = 80

EXPERIENCE_ANCHOR = re.compile(
    r"\b(?:work\s+)?experiences?\b|\bemployment(?:\s+history)?\b"
    r"|\bprofessional\s+experience\b|\bcareer\s+history\b",
    re.IGNORECASE,
)
SECTION_STOP = re.compile(
    r"\b(?:education|academic|qualifications?|skills?|projects?|certifications?|references?"
    r"|personal\s+details|hobbies|achievements?|languages?|declarations?)\b",
    re.IGNORECASE,
)

DATE_RANGE = re.compile(
    r"\b(19\d{2}|20\d{2})\b\s*(?:[-–—]|to|till|until)\s*"
    r"(?:[a-z]{3,9}\.?\s*)?"
    r"\b(19\d{2}|20\d{2}|present|current|now|(?:till\s+)?date|today)\b",
    re.IGNORECASE,
)
DURATION = re.compile(r"(\d+\.?\d*)\s*(?:years?|yrs?)\b", re.IGNORECASE)
MAX_CAREER_SPAN = 40
EARLIEST_START_YEAR = 1960


def _format_number(value: float) -> str:
    return f"{value:g}"


def isolate_experience_section(text: str) -> str:
    """Return the Experience section of a resume, or "" when none is found."""
    collected = []
    in_experience = False

    for line in text.split("\n"):
        trimmed = line.strip()
        if not trimmed:
            continue

        if len(trimmed) < MAX_HEADING_LENGTH:
            letters = re.sub(r"[^a-z]", "", trimmed.lower())
            is_experience = bool(EXPERIENCE_HEADING.match(letters))
            is_other = bool(OTHER_HEADING.match(letters))

            if is_experience and not is_other:
                in_experience = True
                continue
            if is_other and in_experience:
                in_experience = False

        if in_experience:
            collected.append(line)

    if collected:
        return "\n".join(collected)

    # Text extracted without line breaks: fall back to keyword boundaries
    anchor = EXPERIENCE_ANCHOR.search(text)
    if not anchor:
        return ""
    stop = SECTION_STOP.search(text, anchor.start() + 20)
    if stop and stop.start() > anchor.start():
        return text[anchor.start():stop.start()]
    return text[anchor.start():]


def years_from_ranges(section: str, current_year: Optional[int] = None) -> int:
    """Count distinct calendar years covered by the year ranges in ``section``.

    Overlapping jobs share years, so the result is a union, not a sum.
    """
    current_year = current_year or datetime.now().year
    worked_years = set()

    for match in DATE_RANGE.finditer(section):
        start_year = int(match.group(1))
        end_token = match.group(2).lower()
        end_year = int(end_token) if end_token.isdigit() else current_year

        if (
            end_year >= start_year
            and end_year - start_year < MAX_CAREER_SPAN
            and start_year > EARLIEST_START_YEAR
            and end_year <= current_year
        ):
            worked_years.update(range(start_year, end_year))
            if end_year == start_year:
                worked_years.add(start_year)

    return len(worked_years)


def sum_durations(section: str) -> float:
    total = 0.0
    for match in DURATION.finditer(section):
        value = float(match.group(1))
        if 0 < value < MAX_CAREER_SPAN:
            total += value
    return total


def extract_experience(text: str, current_year: Optional[int] = None) -> str:
    """
    Total experience in years, as a string.

    Explicit totals win; otherwise years are inferred from date ranges in the
    Experience section, then from duration phrases in that section.
    """
    for pattern in EXPLICIT_EXPERIENCE_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)

    section = isolate_experience_section(text)
    if not section:
        return ""

    years = years_from_ranges(section, current_year)
    if years > 0:
        return str(years)

    total = sum_durations(section)
    if total > 0:
        return _format_number(total)

    return ""


# ============================================================================
# Education, company, location
# ============================================================================

def _degree_label_from_line(line: str, fallback: str) -> str:
    clean = DEGREE_DELIMITERS.split(line.strip())[0].strip()
    stop = DEGREE_STOPWORDS.search(clean)
    if stop:
        clean = clean[:stop.start()].strip()
    if clean and len(clean) <= MAX_EDUCATION_LABEL:
        return clean
    return fallback


def extract_education(text: str) -> str:
    """Highest qualification found, labelled with the text of its line when short."""
    for pattern, label in DEGREE_HIERARCHY:
        if not pattern.search(text):
            continue
        for line in text.split("\n"):
            if pattern.search(line):
                return _degree_label_from_line(line, label)
        return label
    return ""


CURRENT_COMPANY_PATTERNS = [
    re.compile(
        r"(?:currently\s+working\s+(?:at|with|for)|currently\s+working|current(?:ly)?\s+at"
        r"|working\s+at|employed\s+at)[:\s]+([^\n]+)",
        re.IGNORECASE,
    ),
    re.compile(
        r"(?:present|current)[^\n]*?(?:company|organi[sz]ation|employer)[:\s]+([^\n]+)",
        re.IGNORECASE,
    ),
]


def extract_current_company(text: str) -> str:
    for pattern in CURRENT_COMPANY_PATTERNS:
        match = pattern.search(text)
        if match:
            return re.split(r"[,\n]", match.group(1).strip())[0].strip()
    return ""


def extract_location(text: str) -> str:
    lowered = text.lower()
    for city in INDIAN_CITIES:
        if city.lower() in lowered:
            return city
    return ""


# ============================================================================
# Core Functions
# ============================================================================

def extract_information(text: str) -> ExtractedCandidate:
    """Run every extractor over raw resume text."""
    lines = [line for line in text.split("\n") if line.strip()]

    return ExtractedCandidate(
        name=extract_name(lines),
        email=extract_email(text),
        contact=extract_phone(text),
        linkedin=extract_linkedin(text),
        gender=extract_gender(text),
        skills=extract_skills(text),
        total_experience=extract_experience(text),
        education=extract_education(text),
        current_company=extract_current_company(text),
        current_location=extract_location(text),
    )


def parse_resume(content: bytes, content_type: Optional[str], filename: Optional[str] = None) -> ResumeParseResult:
    """
    Convert an uploaded resume to text and extract candidate fields.

    Args:
        content: Raw file bytes
        content_type: Declared MIME type of the upload
        filename: Original file name, used when the MIME type is generic

    Returns:
        ResumeParseResult; ``success`` is False for unsupported or unreadable files
    """
    resolved_type = resolve_content_type(content_type, filename)

    try:
        text = extract_text(content, resolved_type)
    except UnsupportedDocumentError as e:
        logger.warning(f"Resume rejected ({resolved_type or 'unknown type'}): {e}")
        return ResumeParseResult(success=False, message=str(e))
    except Exception as e:
        logger.error(f"Failed to extract resume text from {filename or 'upload'}: {e}")
        return ResumeParseResult(success=False, message=f"Could not read document: {e}")

    return ResumeParseResult(success=True, data=extract_information(text), raw_text=text)
