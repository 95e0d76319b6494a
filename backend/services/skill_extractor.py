"""Pattern-based skill extraction from course learning outcomes.

Combines four independent pattern families per outcome:
1. Action phrases ("apply Bernoulli's principle", "using MATLAB")
2. Capitalized multi-word technical terms, filtered by an allow/deny heuristic
3. A fixed dictionary of tools and software
4. Domain keywords, gated by markers in the course title/level

Duplicates are merged by normalized name. When too few skills survive,
skills are inferred from the course title at reduced confidence.
"""

import logging
import re

from models.schemas.skill import ExtractedSkill, SkillCategory, SkillExtractionResult

logger = logging.getLogger(__name__)

MAX_CONFIDENCE = 0.95
MERGE_BONUS = 0.05
MIN_SKILLS_BEFORE_FALLBACK = 3

ACTION_CONFIDENCE = 0.85
TERM_CONFIDENCE = 0.75
TOOL_CONFIDENCE = 0.95
DOMAIN_CONFIDENCE = 0.90
TITLE_INFERENCE_BASE = 0.75

# ---------------------------------------------------------------------------
# Family 1: action phrases
# ---------------------------------------------------------------------------
_ACTION_PATTERNS = [
    re.compile(
        r"(?:apply|use|implement|develop|design|create|build|analyze|calculate|compute"
        r"|solve|model|simulate|optimize)\s+"
        r"([A-Z][a-z]+(?:'s)?\s+(?:equation|theorem|principle|law|method|algorithm|model"
        r"|analysis|system|framework|technique))",
        re.IGNORECASE,
    ),
    re.compile(
        r"(?:using|with|via)\s+([A-Z][A-Z]+(?:\s+[A-Z][A-Z]+)*|[A-Z][a-z]+(?:\s+[A-Z][a-z]+){0,2})"
    ),
]

# Known-bad matches, tested against the matched phrase only
_BLACKLIST = [
    re.compile(r"^convert\s+english$", re.IGNORECASE),
    re.compile(r"^explain\s+blaise\s+pascal$", re.IGNORECASE),
    re.compile(r"^convert\s+units$", re.IGNORECASE),
]

# ---------------------------------------------------------------------------
# Family 2: capitalized technical terms
# ---------------------------------------------------------------------------
_TECHNICAL_TERM_PATTERN = re.compile(r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+){1,3})\b")

_TECHNICAL_WHITELIST = [
    re.compile(r"\b(analysis|dynamics|mechanics|simulation|optimization|modeling)\b", re.IGNORECASE),
    re.compile(r"\b(design|testing|validation|integration|implementation)\b", re.IGNORECASE),
    re.compile(r"\b(thermal|fluid|structural|mechanical|electrical|civil)\b", re.IGNORECASE),
    re.compile(r"\b(stress|strain|flow|pressure|velocity|force|energy)\b", re.IGNORECASE),
    re.compile(r"\b(control|systems|processing|manufacturing|fabrication)\b", re.IGNORECASE),
]

_COMMON_WORDS = frozenset({
    "the", "and", "for", "with", "this", "that", "from", "have", "will",
    "understanding", "knowledge", "ability", "students", "learning", "course",
    "project", "assignment", "semester", "weekly", "final", "midterm",
})

# Pure instructions: verb + article/generic object
_INSTRUCTION_PATTERNS = [
    re.compile(r"^(convert|explain|define|describe|state|list)\s+(the|a|an)\s+", re.IGNORECASE),
    re.compile(r"^(solve|calculate|derive|determine)\s+(for|the)\s+", re.IGNORECASE),
    re.compile(r"^(identify|distinguish|formulate)\s+(the|all|various|different)\s+", re.IGNORECASE),
    re.compile(r"^(understand|apply)\s+(the|concepts?|principles?)\s+", re.IGNORECASE),
]

_KNOWN_SINGLE_TERMS = frozenset({
    "thermodynamics", "aerodynamics", "hydrodynamics", "electromagnetism",
    "calculus", "statistics", "probability", "regression", "optimization",
    "algorithm", "encryption", "blockchain", "kubernetes", "tensorflow",
})

# ---------------------------------------------------------------------------
# Family 3: tools and software
# ---------------------------------------------------------------------------
TOOLS: tuple[str, ...] = (
    "MATLAB", "Python", "Java", "JavaScript", "TypeScript", "C++", "C#", "PHP",
    "Kotlin", "SQL", "NoSQL", "MongoDB", "PostgreSQL", "MySQL", "Redis",
    "PowerBI", "Power BI", "Tableau", "PowerPoint", "AutoCAD", "SolidWorks",
    "CATIA", "Revit", "SketchUp", "ANSYS", "COMSOL", "Abaqus", "SPSS", "SAS", "Stata",
    "Minitab", "JMP", "TensorFlow", "PyTorch", "Keras", "Scikit-learn", "Pandas", "NumPy",
    "GitHub", "GitLab", "Bitbucket", "Docker", "Kubernetes", "Jenkins", "CircleCI",
    "AWS", "Azure", "GCP", "Heroku", "Salesforce", "HubSpot", "Marketo",
    "Google Analytics", "Adobe Creative Suite", "Photoshop", "Illustrator", "InDesign",
    "Figma", "InVision", "Jira", "Confluence", "Trello", "Asana", "QuickBooks", "SAP",
    "NetSuite", "LabVIEW", "Simulink", "PSpice", "LTSpice", "NI Multisim", "VHDL",
    "Verilog", "Quartus", "Xilinx", "Vivado", "Altium", "KiCad", "SCADA", "PLC",
    "Arduino", "Raspberry Pi", "ROS", "Gazebo",
)

# Tool names that are also ordinary English words only match with exact casing
AMBIGUOUS_TOOLS: tuple[str, ...] = (
    "R", "Go", "Git", "Ruby", "Swift", "Rust", "Excel", "Word", "Access", "Outlook",
    "Teams", "Slack", "Zoom", "Sketch", "Eagle", "Oracle", "Premiere", "After Effects", "Zeplin", "HMI",
)

_TOOL_CANONICAL = {t.lower(): t for t in TOOLS + AMBIGUOUS_TOOLS}


def _tool_alternation(names: tuple[str, ...]) -> str:
    # Longest first so "Power BI" wins over "Power" style prefixes
    return "|".join(re.escape(n) for n in sorted(names, key=len, reverse=True))


_TOOL_PATTERN = re.compile(r"(?<![\w+#])(" + _tool_alternation(TOOLS) + r")(?![\w+#])", re.IGNORECASE)
_AMBIGUOUS_TOOL_PATTERN = re.compile(r"(?<![\w+#])(" + _tool_alternation(AMBIGUOUS_TOOLS) + r")(?![\w+#])")

_PROGRAMMING_SUFFIX_TOOLS = frozenset({"python", "java", "sql"})

# ---------------------------------------------------------------------------
# Family 4: domain keywords gated by course context
# ---------------------------------------------------------------------------
_ENGINEERING_MARKERS = (
    "engineering", "mechanics", "physics", "civil", "electrical", "chemical",
    "industrial", "aerospace", "biomedical",
)
_CS_MARKERS = ("computer", "data", "software", "cs", "it", "information", "cyber", "network")
_BUSINESS_MARKERS = (
    "business", "management", "marketing", "finance", "accounting", "economics",
    "mba", "commerce", "entrepreneurship",
)

ENGINEERING_TERMS: tuple[str, ...] = (
    "fluid dynamics", "fluid mechanics", "thermodynamics", "heat transfer", "mass transfer",
    "stress analysis", "finite element analysis", "fea", "cad design", "structural analysis",
    "control systems", "circuit design", "signal processing", "mechanical design",
    "thermal systems", "hvac", "computational fluid dynamics", "cfd",
    "statics", "dynamics", "kinematics", "kinetics", "vibrations", "acoustics",
    "materials science", "metallurgy", "composites", "polymers", "ceramics",
    "manufacturing processes", "machining", "welding", "casting", "forming",
    "quality control", "six sigma", "lean manufacturing", "process optimization",
    "power systems", "energy systems", "renewable energy", "solar", "wind", "hydro",
    "robotics", "automation", "mechatronics", "plc programming", "scada",
    "electronics", "microcontrollers", "embedded systems", "pcb design",
    "chemical processes", "process control", "reaction engineering", "separation processes",
    "biomedical devices", "medical imaging", "biomechanics", "tissue engineering",
    "geotechnical engineering", "surveying", "hydraulics", "construction management",
    "transportation engineering", "traffic engineering", "urban planning",
)

CS_TERMS: tuple[str, ...] = (
    "machine learning", "deep learning", "neural networks", "artificial intelligence", "ai",
    "data structures", "algorithms", "computational complexity", "graph theory",
    "database design", "sql", "nosql", "database management", "data warehousing", "etl",
    "web development", "frontend development", "backend development", "full stack",
    "api design", "rest api", "graphql", "microservices", "system architecture",
    "cloud computing", "aws", "azure", "gcp", "serverless", "containers", "kubernetes",
    "data analysis", "statistical modeling", "data visualization", "business intelligence",
    "natural language processing", "nlp", "computer vision", "image processing",
    "big data", "hadoop", "spark", "data pipelines", "data engineering",
    "software engineering", "object oriented programming", "oop", "design patterns",
    "agile development", "scrum", "devops", "ci cd", "version control", "git",
    "mobile development", "ios development", "android development", "react native",
    "cybersecurity", "network security", "cryptography", "penetration testing",
    "operating systems", "linux", "unix", "system administration",
    "networking", "tcp ip", "routing", "switching", "firewalls",
    "ui ux design", "user interface", "user experience", "prototyping",
    "game development", "unity", "unreal engine", "3d modeling",
    "blockchain", "smart contracts", "cryptocurrency", "distributed systems",
)

BUSINESS_TERMS: tuple[str, ...] = (
    "financial analysis", "financial modeling", "valuation", "dcf analysis", "lbo modeling",
    "market research", "swot analysis", "competitive analysis", "porter five forces",
    "business strategy", "strategic planning", "business development", "corporate strategy",
    "marketing strategy", "brand management", "customer segmentation", "roi analysis",
    "digital marketing", "social media marketing", "content marketing", "seo", "sem",
    "project management", "agile project management", "pmp", "change management",
    "supply chain management", "logistics", "procurement", "inventory management",
    "operations management", "process optimization", "quality management", "lean six sigma",
    "financial accounting", "managerial accounting", "cost accounting", "tax accounting",
    "audit", "internal audit", "compliance", "risk management", "internal controls",
    "investment banking", "equity research", "asset management", "portfolio management",
    "corporate finance", "mergers acquisitions", "m&a", "capital markets",
    "economics", "microeconomics", "macroeconomics", "econometrics", "regression analysis",
    "human resources", "hr management", "talent acquisition", "performance management",
    "organizational behavior", "leadership", "team management", "conflict resolution",
    "sales management", "business to business", "b2b sales", "crm", "salesforce",
    "entrepreneurship", "startup", "venture capital", "fundraising", "pitch deck",
    "e-commerce", "retail management", "merchandising", "pricing strategy",
    "international business", "global strategy", "cross cultural management",
    "business analytics", "data driven decision making", "predictive analytics", "kpi tracking",
)

# Lowercase dictionary terms that render as acronyms
_ACRONYMS = frozenset({
    "ai", "api", "aws", "b2b", "cad", "cfd", "crm", "dcf", "etl", "fea", "gcp", "hr",
    "hvac", "ios", "ip", "kpi", "lbo", "m&a", "nlp", "oop", "pcb", "plc", "pmp", "rest",
    "roi", "scada", "sem", "seo", "sql", "swot", "tcp", "ui", "ux", "3d",
})

# ---------------------------------------------------------------------------
# Title inference fallback
# ---------------------------------------------------------------------------
# (title substrings, [(skill, category)])
DISCIPLINE_SKILLS: list[tuple[tuple[str, ...], list[tuple[str, SkillCategory]]]] = [
    (("mechanical", "thermal"), [
        ("Mechanical Design", "technical"), ("Thermodynamics", "technical"),
        ("Heat Transfer", "technical"), ("CAD Modeling", "tool"),
    ]),
    (("aerospace", "aeronautic"), [
        ("Aerodynamics", "technical"), ("Propulsion Systems", "technical"),
        ("Flight Dynamics", "technical"),
    ]),
    (("electrical", "electronic", "circuit"), [
        ("Circuit Design", "technical"), ("Signal Processing", "technical"),
        ("Power Systems", "technical"), ("Embedded Systems", "technical"),
    ]),
    (("civil", "structural", "construction"), [
        ("Structural Analysis", "technical"), ("Construction Management", "domain"),
        ("Geotechnical Engineering", "technical"),
    ]),
    (("chemical", "chemistry"), [
        ("Chemical Process Design", "technical"), ("Mass Transfer", "technical"),
        ("Process Control", "technical"),
    ]),
    (("industrial", "systems engineering", "operations research"), [
        ("Process Optimization", "analytical"), ("Systems Analysis", "analytical"),
        ("Quality Control", "technical"),
    ]),
    (("biomedical", "bioengineering"), [
        ("Biomechanics", "technical"), ("Medical Device Design", "technical"),
        ("Biomedical Instrumentation", "technical"),
    ]),
    (("computer science", "software", "programming", "computing"), [
        ("Software Engineering", "technical"), ("Data Structures", "technical"),
        ("Algorithms", "technical"), ("Object Oriented Programming", "technical"),
    ]),
    (("data science", "data analytics", "machine learning", "artificial intelligence"), [
        ("Machine Learning", "technical"), ("Data Analysis", "analytical"),
        ("Statistical Modeling", "analytical"), ("Data Visualization", "analytical"),
    ]),
    (("cyber", "security", "network"), [
        ("Network Security", "technical"), ("Cryptography", "technical"),
        ("Risk Assessment", "analytical"),
    ]),
    (("statistic",), [
        ("Statistical Modeling", "analytical"), ("Regression Analysis", "analytical"),
        ("Probability", "analytical"),
    ]),
    (("marketing",), [
        ("Marketing Strategy", "analytical"), ("Market Research", "analytical"),
        ("Digital Marketing", "domain"),
    ]),
    (("finance", "financial", "accounting"), [
        ("Financial Analysis", "analytical"), ("Financial Modeling", "analytical"),
        ("Valuation", "analytical"),
    ]),
    (("supply chain", "logistics"), [
        ("Supply Chain Management", "analytical"), ("Inventory Management", "analytical"),
        ("Logistics", "domain"),
    ]),
    (("business", "management", "mba", "entrepreneur"), [
        ("Business Strategy", "analytical"), ("Project Management", "framework"),
        ("Business Analytics", "analytical"),
    ]),
    (("economics",), [
        ("Econometrics", "analytical"), ("Microeconomics", "domain"),
        ("Regression Analysis", "analytical"),
    ]),
]

GENERIC_SKILLS: list[tuple[str, SkillCategory]] = [
    ("Problem Solving", "analytical"),
    ("Data Analysis", "analytical"),
    ("Technical Communication", "analytical"),
]

_INTRO_MARKERS = ("intro", "introductory", "introduction", "beginner", "fundamentals", "freshman", "100-level")
_LEVEL_MULTIPLIERS: list[tuple[tuple[str, ...], float]] = [
    (("graduate", "master", "phd", "doctoral", "postgraduate"), 1.0),
    (("advanced", "senior", "upper", "capstone", "400", "500"), 0.95),
    (("intermediate", "200", "300", "junior", "sophomore"), 0.9),
    (_INTRO_MARKERS, 0.8),
]
_DEFAULT_LEVEL_MULTIPLIER = 0.9
_INTRO_EXTRA_FACTOR = 0.9


# ---------------------------------------------------------------------------
# Normalization helpers
# ---------------------------------------------------------------------------

def _title_case(text: str) -> str:
    """Title-case each word, leaving all-caps acronyms untouched."""
    def repl(m: re.Match) -> str:
        word = m.group(0)
        if len(word) > 1 and word == word.upper():
            return word
        return word.capitalize()
    return re.sub(r"\w\S*", repl, text)


def normalize_skill_name(skill: str) -> str:
    """Drop possessives, collapse whitespace, and title-case. Idempotent."""
    normalized = re.sub(r"(?:['’][sS])+\b", "", skill)
    normalized = re.sub(r"\s+", " ", normalized.strip())
    return _title_case(normalized)


def skill_key(name: str) -> str:
    """Dedup key: lowercase alphanumerics only."""
    return re.sub(r"[^a-z0-9]", "", name.lower())


def _display_term(term: str) -> str:
    return " ".join(w.upper() if w in _ACRONYMS else w.capitalize() for w in term.split())


def _extract_keywords(skill: str) -> list[str]:
    words = re.sub(r"['’]", "", skill.lower()).split()
    return [w for w in words if len(w) > 2 and w not in {"the", "and", "for", "with"}]


def _excerpt(text: str) -> str:
    return text if len(text) <= 100 else text[:100] + "..."


def _contains_marker(context: str, markers: tuple[str, ...]) -> bool:
    for marker in markers:
        if len(marker) <= 2:
            if re.search(rf"\b{re.escape(marker)}\b", context):
                return True
        elif marker in context:
            return True
    return False


def _is_blacklisted(phrase: str) -> bool:
    return any(p.search(phrase) for p in _BLACKLIST)


def categorize_skill(skill: str, course_context: str) -> SkillCategory:
    lower = skill.lower()
    context = course_context.lower()
    if re.search(r"matlab|python|java|sql|excel|cad|ansys|tensorflow|spss|tableau|git|docker|aws", lower):
        return "tool"
    if re.search(r"framework|methodology|method|approach|technique", lower):
        return "framework"
    if re.search(r"engineering|computer|software|technical|\bcs\b|data", context) and re.search(
        r"design|analysis|modeling|simulation|algorithm|system|calculation|computation", lower
    ):
        return "technical"
    if re.search(r"analysis|research|strategy|evaluation|assessment|optimization", lower):
        return "analytical"
    return "domain"


def is_technical_term(term: str) -> bool:
    """Allow/deny heuristic for capitalized phrases.

    The technical whitelist wins over everything else; otherwise common
    words and pure instructions ("Explain the ...") are rejected, and a
    single word must be a known technical term.
    """
    if any(p.search(term) for p in _TECHNICAL_WHITELIST):
        return True
    lower = term.lower()
    if lower in _COMMON_WORDS:
        return False
    if any(p.search(term) for p in _INSTRUCTION_PATTERNS):
        return False
    if len(term.split()) < 2 and lower not in _KNOWN_SINGLE_TERMS:
        return False
    return True


# ---------------------------------------------------------------------------
# Pattern families
# ---------------------------------------------------------------------------

def _action_skills(text: str, course_context: str) -> list[ExtractedSkill]:
    skills = []
    for pattern in _ACTION_PATTERNS:
        for match in pattern.finditer(text):
            phrase = match.group(1).strip()
            if _is_blacklisted(phrase) or len(phrase) <= 3:
                continue
            skills.append(ExtractedSkill(
                name=normalize_skill_name(phrase),
                category=categorize_skill(phrase, course_context),
                confidence=ACTION_CONFIDENCE,
                source=_excerpt(text),
                keywords=_extract_keywords(phrase),
            ))
    return skills


def _technical_term_skills(text: str, course_context: str) -> list[ExtractedSkill]:
    skills = []
    for match in _TECHNICAL_TERM_PATTERN.finditer(text):
        term = match.group(1).strip()
        if _is_blacklisted(term) or not is_technical_term(term):
            continue
        skills.append(ExtractedSkill(
            name=normalize_skill_name(term),
            category=categorize_skill(term, course_context),
            confidence=TERM_CONFIDENCE,
            source=_excerpt(text),
            keywords=_extract_keywords(term),
        ))
    return skills


def _tool_skills(text: str) -> list[ExtractedSkill]:
    found = [m.group(1) for m in _TOOL_PATTERN.finditer(text)]
    found += [m.group(1) for m in _AMBIGUOUS_TOOL_PATTERN.finditer(text)]
    skills = []
    for raw in found:
        tool = _TOOL_CANONICAL.get(raw.lower(), raw)
        name = f"{tool} Programming" if tool.lower() in _PROGRAMMING_SUFFIX_TOOLS else tool
        skills.append(ExtractedSkill(
            name=name,
            category="tool",
            confidence=TOOL_CONFIDENCE,
            source=_excerpt(text),
            keywords=[tool.lower()],
        ))
    return skills


def _scan_terms(text: str, terms: tuple[str, ...], category: SkillCategory) -> list[ExtractedSkill]:
    lower = text.lower()
    hits = [t for t in terms if re.search(rf"(?<!\w){re.escape(t)}(?!\w)", lower)]
    # Drop terms already covered by a longer hit ("dynamics" inside "fluid dynamics")
    hits = [t for t in hits if not any(t != other and f" {t} " in f" {other} " for other in hits)]
    return [
        ExtractedSkill(
            name=_display_term(t),
            category=category,
            confidence=DOMAIN_CONFIDENCE,
            source=_excerpt(text),
            keywords=t.split(),
        )
        for t in hits
    ]


def _domain_skills(text: str, course_context: str) -> list[ExtractedSkill]:
    context = course_context.lower()
    skills = []
    if _contains_marker(context, _ENGINEERING_MARKERS):
        skills.extend(_scan_terms(text, ENGINEERING_TERMS, "technical"))
    if _contains_marker(context, _CS_MARKERS):
        skills.extend(_scan_terms(text, CS_TERMS, "technical"))
    if _contains_marker(context, _BUSINESS_MARKERS):
        skills.extend(_scan_terms(text, BUSINESS_TERMS, "analytical"))
    return skills


def extract_from_text(text: str, course_context: str = "") -> list[ExtractedSkill]:
    """Run all four pattern families over one outcome string (no dedup)."""
    if not text or not text.strip():
        return []
    return (
        _action_skills(text, course_context)
        + _technical_term_skills(text, course_context)
        + _tool_skills(text)
        + _domain_skills(text, course_context)
    )


# ---------------------------------------------------------------------------
# Dedup and fallback
# ---------------------------------------------------------------------------

def merge_skills(skills: list[ExtractedSkill]) -> list[ExtractedSkill]:
    """Merge skills sharing a normalized name.

    The first occurrence keeps its name, category and source; confidence
    becomes max(a, b) + 0.05, capped at 0.95, so a merge never lowers it.
    """
    merged: dict[str, ExtractedSkill] = {}
    for skill in skills:
        key = skill_key(skill.name)
        if not key:
            continue
        existing = merged.get(key)
        if existing is None:
            merged[key] = skill.model_copy(deep=True)
            continue
        existing.confidence = min(
            MAX_CONFIDENCE, max(existing.confidence, skill.confidence) + MERGE_BONUS
        )
        existing.keywords = list(dict.fromkeys(existing.keywords + skill.keywords))
    return list(merged.values())


def _has_marker(text: str, markers: tuple[str, ...]) -> bool:
    # Prefix match at a word start: "intro" matches "introduction", "graduate" skips "undergraduate"
    return re.search(r"\b(?:" + "|".join(re.escape(m) for m in markers) + ")", text) is not None


def level_multiplier(level: str | None, title: str | None = None) -> float:
    """Confidence multiplier for title-inferred skills, by course level."""
    text = f"{level or ''} {title or ''}".lower()
    multiplier = _DEFAULT_LEVEL_MULTIPLIER
    for markers, value in _LEVEL_MULTIPLIERS:
        if _has_marker(text, markers):
            multiplier = value
            break
    if _has_marker(text, _INTRO_MARKERS):
        multiplier *= _INTRO_EXTRA_FACTOR
    return multiplier


def infer_skills_from_title(title: str, level: str | None = None) -> list[ExtractedSkill]:
    lower = title.lower()
    confidence = round(TITLE_INFERENCE_BASE * level_multiplier(level, title), 4)

    picked: list[tuple[str, SkillCategory]] = []
    for keys, discipline_skills in DISCIPLINE_SKILLS:
        if any(k in lower for k in keys):
            picked.extend(discipline_skills)
    if not picked:
        logger.info("No discipline matched title %r, using generic skills", title)
        picked = GENERIC_SKILLS

    return [
        ExtractedSkill(
            name=name,
            category=category,
            confidence=confidence,
            source=f"inferred from course title: {title}",
            keywords=_extract_keywords(name),
        )
        for name, category in picked
    ]


def extract_skills(
    outcomes: list[str],
    title: str | None = None,
    level: str | None = None,
) -> SkillExtractionResult:
    """Extract deduplicated, confidence-sorted skills from course outcomes.

    Never raises: empty input yields an empty (or title-inferred) result.
    """
    course_context = f"{title or ''} {level or ''}".strip()

    raw: list[ExtractedSkill] = []
    for outcome in outcomes or []:
        try:
            raw.extend(extract_from_text(outcome, course_context))
        except Exception as e:
            logger.warning("Skill extraction failed for outcome %r: %s", outcome[:60], e)

    skills = merge_skills(raw)
    method = "pattern"

    if len(skills) < MIN_SKILLS_BEFORE_FALLBACK and title and title.strip():
        logger.info("Only %d skills extracted, inferring from title %r", len(skills), title)
        skills = merge_skills(skills + infer_skills_from_title(title, level))
        method = "pattern+title_inference"

    skills.sort(key=lambda s: s.confidence, reverse=True)
    return SkillExtractionResult(
        skills=skills,
        total_extracted=len(skills),
        course_context=course_context,
        extraction_method=method,
    )
