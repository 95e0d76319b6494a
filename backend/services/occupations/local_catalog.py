"""Local occupation catalog provider.

A curated, in-process catalog of common course-to-occupation mappings.
No network calls, no rate limits, always available; less comprehensive
than the public taxonomies, so it is one vote among several in the
coordinator.
"""

import logging
import time
from dataclasses import dataclass

from models.schemas.occupation import (
    OccupationMappingResult,
    OccupationSkill,
    StandardOccupation,
    WorkActivity,
)
from models.schemas.skill import ExtractedSkill
from services.occupations.base import OccupationProvider, unmapped_skill_names

logger = logging.getLogger(__name__)

MIN_MATCH_SCORE = 0.2
MAX_RESULTS = 5
SKILL_IMPORTANCE = 80.0
ACTIVITY_IMPORTANCE = 75.0


@dataclass(frozen=True)
class CatalogOccupation:
    code: str  # SOC 2018
    title: str
    description: str
    keywords: tuple[str, ...]
    skills: tuple[str, ...]
    activities: tuple[str, ...]
    tools: tuple[str, ...]
    related_titles: tuple[str, ...] = ()

    def match_terms(self) -> list[str]:
        return (
            list(self.keywords)
            + [s.lower() for s in self.skills]
            + [t.lower() for t in self.tools]
            + [self.title.lower()]
        )


CATALOG: tuple[CatalogOccupation, ...] = (
    # Engineering
    CatalogOccupation(
        code="17-2141.00",
        title="Mechanical Engineer",
        description="Design and develop mechanical and thermal devices",
        keywords=("mechanical", "thermodynamics", "fluid", "cad", "solidworks", "ansys", "heat transfer", "mechanics"),
        skills=("CAD Design", "Thermodynamics", "Fluid Mechanics", "Materials Science", "MATLAB", "FEA Analysis"),
        activities=("Design mechanical systems", "Conduct thermal analysis", "Test prototypes",
                    "Create technical drawings"),
        tools=("SolidWorks", "AutoCAD", "ANSYS", "MATLAB", "CATIA"),
        related_titles=("HVAC Engineer", "Thermal Engineer", "Design Engineer", "Product Engineer"),
    ),
    CatalogOccupation(
        code="17-2071.00",
        title="Electrical Engineer",
        description="Design and develop electrical systems and components",
        keywords=("electrical", "circuit", "power", "electronics", "pspice", "pcb", "embedded", "control systems"),
        skills=("Circuit Design", "Power Systems", "Embedded Systems", "PCB Design", "Control Theory",
                "Signal Processing"),
        activities=("Design electrical circuits", "Test electronic systems", "Develop embedded software",
                    "Analyze power systems"),
        tools=("PSpice", "Altium", "Eagle", "LabVIEW", "MATLAB"),
        related_titles=("Electronics Engineer", "Power Systems Engineer", "Control Systems Engineer"),
    ),
    CatalogOccupation(
        code="17-2051.00",
        title="Civil Engineer",
        description="Design and oversee construction of infrastructure projects",
        keywords=("civil", "structural", "construction", "autocad", "geotechnical", "transportation", "surveying"),
        skills=("Structural Analysis", "AutoCAD", "Project Management", "Geotechnical Engineering", "Surveying"),
        activities=("Design infrastructure projects", "Conduct site inspections", "Prepare construction plans",
                    "Analyze structural integrity"),
        tools=("AutoCAD Civil 3D", "Revit", "SAP2000", "STAAD Pro"),
        related_titles=("Structural Engineer", "Transportation Engineer", "Geotechnical Engineer"),
    ),
    CatalogOccupation(
        code="17-2041.00",
        title="Chemical Engineer",
        description="Design chemical manufacturing processes and equipment",
        keywords=("chemical", "process", "reactor", "thermodynamics", "mass transfer", "unit operations", "aspen"),
        skills=("Chemical Process Design", "Thermodynamics", "Mass Transfer", "Reaction Engineering",
                "Process Simulation"),
        activities=("Design chemical processes", "Optimize production systems", "Conduct process simulations",
                    "Ensure safety compliance"),
        tools=("Aspen Plus", "HYSYS", "ChemCAD", "MATLAB"),
        related_titles=("Process Engineer", "Production Engineer", "Plant Engineer"),
    ),
    # Computing
    CatalogOccupation(
        code="15-1252.00",
        title="Software Engineer",
        description="Design, develop, and maintain software applications",
        keywords=("programming", "software", "coding", "algorithm", "data structures", "python", "java",
                  "javascript", "web", "api"),
        skills=("Python", "Java", "JavaScript", "Data Structures", "Algorithms", "Git", "REST API", "SQL"),
        activities=("Write and test code", "Design software architecture", "Debug applications",
                    "Collaborate with teams"),
        tools=("Git", "VS Code", "IntelliJ", "Docker", "Jenkins"),
        related_titles=("Full Stack Developer", "Backend Developer", "Frontend Developer"),
    ),
    CatalogOccupation(
        code="15-2051.00",
        title="Data Scientist",
        description="Analyze complex data and build predictive models",
        keywords=("data science", "machine learning", "statistics", "python", "r", "sql", "tensorflow", "pandas",
                  "numpy", "visualization"),
        skills=("Python", "Machine Learning", "Statistics", "SQL", "Data Visualization", "TensorFlow", "Pandas",
                "NumPy"),
        activities=("Build predictive models", "Analyze datasets", "Create visualizations", "Communicate insights"),
        tools=("Python", "R", "Jupyter", "TensorFlow", "PyTorch", "Tableau", "SQL"),
        related_titles=("Machine Learning Engineer", "Data Analyst", "AI Engineer"),
    ),
    CatalogOccupation(
        code="15-1244.00",
        title="DevOps Engineer",
        description="Manage infrastructure and deployment pipelines",
        keywords=("devops", "cloud", "aws", "azure", "docker", "kubernetes", "ci/cd", "terraform", "jenkins",
                  "automation"),
        skills=("AWS", "Docker", "Kubernetes", "CI/CD", "Terraform", "Linux", "Scripting", "Monitoring"),
        activities=("Manage cloud infrastructure", "Automate deployments", "Monitor systems", "Ensure reliability"),
        tools=("AWS", "Docker", "Kubernetes", "Jenkins", "Terraform", "Ansible", "Prometheus"),
        related_titles=("Site Reliability Engineer", "Cloud Engineer", "Platform Engineer"),
    ),
    CatalogOccupation(
        code="15-1212.00",
        title="Cybersecurity Engineer",
        description="Protect systems and networks from security threats",
        keywords=("security", "cybersecurity", "network", "firewall", "penetration", "encryption", "cryptography",
                  "vulnerability"),
        skills=("Network Security", "Penetration Testing", "Cryptography", "Security Analysis", "Incident Response"),
        activities=("Monitor security threats", "Conduct penetration tests", "Implement security measures",
                    "Respond to incidents"),
        tools=("Wireshark", "Metasploit", "Nmap", "Burp Suite", "Splunk"),
        related_titles=("Security Analyst", "Penetration Tester", "Information Security Analyst"),
    ),
    # Business
    CatalogOccupation(
        code="13-2051.00",
        title="Financial Analyst",
        description="Analyze financial data and provide investment recommendations",
        keywords=("finance", "financial", "accounting", "excel", "modeling", "valuation", "roi", "dcf",
                  "investment"),
        skills=("Financial Modeling", "Excel", "Valuation", "Accounting", "Data Analysis", "Forecasting"),
        activities=("Build financial models", "Analyze financial statements", "Prepare reports",
                    "Make recommendations"),
        tools=("Excel", "Bloomberg Terminal", "Power BI", "SQL", "Python"),
        related_titles=("Investment Analyst", "Equity Analyst", "Credit Analyst"),
    ),
    CatalogOccupation(
        code="11-2021.00",
        title="Marketing Manager",
        description="Develop and execute marketing strategies",
        keywords=("marketing", "brand", "campaign", "digital marketing", "social media", "analytics", "seo",
                  "content", "customer"),
        skills=("Marketing Strategy", "Digital Marketing", "Brand Management", "Analytics", "SEO",
                "Content Creation"),
        activities=("Develop marketing campaigns", "Analyze market trends", "Manage brand positioning",
                    "Track KPIs"),
        tools=("Google Analytics", "HubSpot", "Tableau", "Excel", "Social Media Platforms"),
        related_titles=("Brand Manager", "Digital Marketing Manager", "Growth Manager"),
    ),
    CatalogOccupation(
        code="11-9199.00",
        title="Product Manager",
        description="Define and execute product strategy and roadmap",
        keywords=("product", "product management", "roadmap", "agile", "scrum", "user", "feature", "strategy",
                  "stakeholder"),
        skills=("Product Strategy", "Agile", "User Research", "Data Analysis", "Stakeholder Management",
                "Roadmap Planning"),
        activities=("Define product vision", "Prioritize features", "Work with engineering",
                    "Analyze user feedback"),
        tools=("Jira", "Confluence", "Figma", "Excel", "Analytics Tools"),
        related_titles=("Technical Product Manager", "Product Owner", "Product Lead"),
    ),
    CatalogOccupation(
        code="13-1111.00",
        title="Business Analyst",
        description="Analyze business processes and recommend improvements",
        keywords=("business", "analysis", "requirements", "process", "sql", "data", "stakeholder",
                  "documentation"),
        skills=("Requirements Gathering", "Process Analysis", "SQL", "Data Analysis", "Documentation",
                "Stakeholder Communication"),
        activities=("Gather requirements", "Analyze business processes", "Create documentation",
                    "Facilitate meetings"),
        tools=("Excel", "SQL", "Visio", "Tableau", "Jira"),
        related_titles=("Systems Analyst", "Process Analyst", "IT Business Analyst"),
    ),
    # Data
    CatalogOccupation(
        code="15-1243.00",
        title="Data Engineer",
        description="Build and maintain data pipelines and infrastructure",
        keywords=("data engineering", "etl", "pipeline", "sql", "spark", "hadoop", "airflow", "warehouse",
                  "kafka"),
        skills=("SQL", "Python", "ETL", "Spark", "Data Warehousing", "Airflow", "Kafka"),
        activities=("Build data pipelines", "Maintain data infrastructure", "Optimize queries",
                    "Ensure data quality"),
        tools=("SQL", "Spark", "Airflow", "Kafka", "dbt", "Snowflake", "Redshift"),
        related_titles=("ETL Developer", "Data Platform Engineer", "Big Data Engineer"),
    ),
)


def match_score(skill_names: list[str], occupation: CatalogOccupation) -> float:
    """Fraction of skills matching the occupation: exact term 1.0, substring 0.5."""
    if not skill_names:
        return 0.0
    terms = occupation.match_terms()
    text = " ".join(terms)
    score = 0.0
    for skill in skill_names:
        if skill in terms:
            score += 1.0
        elif skill in text:
            score += 0.5
    return min(1.0, score / len(skill_names))


def confidence_for(score: float) -> float:
    if score >= 0.7:
        return 0.9
    if score >= 0.5:
        return 0.75
    if score >= 0.3:
        return 0.6
    return 0.5


class LocalCatalogProvider(OccupationProvider):
    name = "local_catalog"

    def __init__(self, catalog: tuple[CatalogOccupation, ...] = CATALOG, priority: int = 3) -> None:
        self.catalog = catalog
        self.priority = priority

    async def health_check(self) -> bool:
        return len(self.catalog) > 0

    async def map_skills_to_occupations(self, skills: list[ExtractedSkill]) -> OccupationMappingResult:
        start = time.perf_counter()
        names = [s.name.lower() for s in skills]

        scored = [(occ, match_score(names, occ)) for occ in self.catalog]
        scored = [(occ, score) for occ, score in scored if score > MIN_MATCH_SCORE]
        scored.sort(key=lambda pair: pair[1], reverse=True)

        occupations = [self._to_standard(occ, score) for occ, score in scored[:MAX_RESULTS]]
        logger.info("Local catalog mapped %d skills to %d occupations", len(skills), len(occupations))

        return OccupationMappingResult(
            occupations=occupations,
            unmapped_skills=unmapped_skill_names(skills, occupations),
            provider=self.name,
            processing_time_ms=(time.perf_counter() - start) * 1000,
        )

    def _to_standard(self, occ: CatalogOccupation, score: float) -> StandardOccupation:
        return StandardOccupation(
            code=occ.code,
            title=occ.title,
            description=occ.description,
            match_score=round(score, 4),
            confidence=confidence_for(score),
            skills=[OccupationSkill(name=s, description=s, importance=SKILL_IMPORTANCE) for s in occ.skills],
            work_activities=[
                WorkActivity(name=a, description=a, importance=ACTIVITY_IMPORTANCE) for a in occ.activities
            ],
            tools=list(occ.tools),
            tasks=list(occ.activities),
            provider=self.name,
        )
