"""
Flexible spreadsheet column matching for candidate imports.

Recruiters upload sheets exported from job portals, client trackers and
hand-made lists, so headers are matched loosely against alias lists.
"""
import re
from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional

MIN_LOOSE_ALIAS_LENGTH = 4

_SEPARATORS = re.compile(r"[\s_\-.]+")

# Canonical field -> header aliases. Order inside a list does not matter for
# exact matches; fields are resolved independently of each other.
CANONICAL_COLUMNS: Dict[str, tuple] = {
    "name": ("name", "candidatename", "fullname", "candidate", "applicant", "applicantname"),
    "email": ("email", "emailid", "emailaddress", "mail"),
    "contact": (
        "contact", "phone", "mobile", "mobileno", "phoneno", "contactno",
        "phonenumber", "mobilenumber", "contactnumber", "cellphone",
    ),
    "position": (
        "position", "jobtitle", "designation", "role", "jobposition",
        "appliedfor", "appliedposition",
    ),
    "client": (
        "client", "clientname", "clientcompany", "hiringclient", "company",
        "companyname", "organization",
    ),
    "skills": ("skills", "skill", "technologies", "techstack", "keyskills", "technicalskills"),
    "current_location": (
        "currentlocation", "location", "city", "loc", "presentlocation", "place",
    ),
    "preferred_location": ("preferredlocation", "preflocation", "preferredcity", "jobcity"),
    "total_experience": (
        "totalexperience", "totalexp", "experience", "yoe", "yearsofexperience",
        "totalyears", "exp",
    ),
    "relevant_experience": (
        "relevantexperience", "relevantexp", "relexp", "relatedexperience",
    ),
    "ectc": (
        "ectc", "expectedctc", "expectedsalary", "expctc", "expectedpackage", "expectedcost",
    ),
    "ctc": ("ctc", "currentctc", "currentsalary", "currentpackage", "currentcost"),
    "take_home_salary": ("takehome", "takehomesalary", "inhands", "inhandsalary", "netsalary"),
    "notice_period": ("noticeperiod", "notice", "np", "noticetime", "noticeduration"),
    "remarks": ("remarks", "feedback", "comments", "notes", "comment"),
    "source": ("source", "reference", "referral", "sourceofcandidate", "candidatesource"),
    "status": ("status", "candidatestatus", "currentstatus", "stage"),
    "current_company": (
        "currentcompany", "presentcompany", "employer", "currentorganization", "workingat",
    ),
    "education": (
        "education", "qualification", "degree", "highestqualification", "academicqualification",
    ),
    "gender": ("gender", "sex"),
    "linkedin": ("linkedin", "linkedinurl", "linkedinprofile", "linkedinid"),
    "industry": ("industry", "sector", "domain", "industrytype"),
    "date_of_birth": ("dob", "dateofbirth", "birthdate", "birthday"),
}


def normalize_header(value: Any) -> str:
    """Lowercase and drop spaces, underscores, hyphens and dots."""
    return _SEPARATORS.sub("", str(value).lower())


def find_column(headers: Iterable[str], *aliases: str) -> Optional[str]:
    """
    Resolve one field to a sheet header.

    Pass 1 - exact normalized match
    Pass 2 - header starts with an alias of at least 4 characters
    Pass 3 - header contains an alias of at least 4 characters

    Returns the original header, or None when nothing matches.
    """
    normalized_aliases = [normalize_header(alias) for alias in aliases]
    loose_aliases = [alias for alias in normalized_aliases if len(alias) >= MIN_LOOSE_ALIAS_LENGTH]
    keyed = [(header, normalize_header(header)) for header in headers if header]

    for header, key in keyed:
        if key in normalized_aliases:
            return header

    for header, key in keyed:
        if any(key.startswith(alias) for alias in loose_aliases):
            return header

    for header, key in keyed:
        if any(alias in key for alias in loose_aliases):
            return header

    return None


def resolve_columns(headers: Iterable[str]) -> Dict[str, Optional[str]]:
    """Map every canonical field to a header (or None) for one sheet."""
    headers = list(headers)
    return {field: find_column(headers, *aliases) for field, aliases in CANONICAL_COLUMNS.items()}


def cell_value(row: Dict[str, Any], column: Optional[str]) -> str:
    """Cell content as trimmed text; missing cells and unmapped columns are ""."""
    if not column or column not in row:
        return ""
    value = row[column]
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        # Excel stores phone numbers and whole amounts as floats
        return str(int(round(value))) if value.is_integer() or abs(value) >= 1e15 else str(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()
