"""
Fixed option lists offered by the company forms.
"""

from __future__ import annotations

TECH_STACK_OPTIONS = (
    # Languages
    "JavaScript",
    "TypeScript",
    "Python",
    "Java",
    "Go",
    "Rust",
    "Ruby",
    "PHP",
    "C#",
    "Swift",
    "Kotlin",
    # Frontend
    "React",
    "Vue.js",
    "Angular",
    "Next.js",
    "Svelte",
    # Backend
    "Node.js",
    "Django",
    "Flask",
    "Spring Boot",
    "Express.js",
    "FastAPI",
    "Ruby on Rails",
    # Mobile
    "React Native",
    "Flutter",
    "iOS Native",
    "Android Native",
    # Databases
    "PostgreSQL",
    "MongoDB",
    "MySQL",
    "Redis",
    "Elasticsearch",
    # Cloud & DevOps
    "AWS",
    "Google Cloud",
    "Azure",
    "Docker",
    "Kubernetes",
    # AI/ML
    "TensorFlow",
    "PyTorch",
    "Machine Learning",
    "AI/LLM",
    # Other
    "GraphQL",
    "REST API",
    "Microservices",
    "Blockchain",
    "Web3",
)

COMPANY_SIZE_OPTIONS = (
    "1-10",
    "11-50",
    "51-200",
    "201-500",
    "501-1000",
    "1000+",
)

FUNDING_STAGE_OPTIONS = (
    "Pre-seed",
    "Seed",
    "Series A",
    "Series B",
    "Series C",
    "Series D+",
    "IPO",
    "Bootstrapped",
)


def all_options() -> dict[str, list[str]]:
    return {
        "tech_stack": list(TECH_STACK_OPTIONS),
        "company_size": list(COMPANY_SIZE_OPTIONS),
        "funding_stage": list(FUNDING_STAGE_OPTIONS),
    }
