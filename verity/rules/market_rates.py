"""Market rates for Indian freelancers, in INR, from 2024 surveys."""

from typing import Dict, List

from verity.schemas.tools import ExperienceLevel, MarketRate, RateRange, RateUnit


def _rate(rate_id, category, label, unit, beginner, intermediate, expert, source) -> MarketRate:
    return MarketRate(
        id=rate_id,
        category=category,
        label=label,
        rates={
            ExperienceLevel.BEGINNER: RateRange(min=beginner[0], max=beginner[1], unit=unit),
            ExperienceLevel.INTERMEDIATE: RateRange(min=intermediate[0], max=intermediate[1], unit=unit),
            ExperienceLevel.EXPERT: RateRange(min=expert[0], max=expert[1], unit=unit),
        },
        data_source=source,
    )


MARKET_RATES: List[MarketRate] = [
    # Content writing
    _rate("content_blog", "content_writing", "Blog Posts (1500 words)", RateUnit.PER_POST,
          (1500, 2500), (3000, 5000), (5000, 10000), "Freelancers Union India 2024"),
    _rate("content_copywriting", "content_writing", "Copywriting (Website/Ad)", RateUnit.PER_WORD,
          (2, 4), (4, 8), (8, 15), "Freelancers Union India 2024"),
    _rate("content_technical", "content_writing", "Technical Writing", RateUnit.PER_WORD,
          (3, 5), (5, 10), (10, 20), "Freelancers Union India 2024"),
    # Graphic design
    _rate("design_logo", "graphic_design", "Logo Design", RateUnit.PER_PROJECT,
          (3000, 8000), (10000, 25000), (30000, 100000), "NASSCOM Freelancer Report 2024"),
    _rate("design_social", "graphic_design", "Social Media Graphics", RateUnit.PER_POST,
          (500, 1000), (1000, 2500), (2500, 5000), "NASSCOM Freelancer Report 2024"),
    # UI/UX design
    _rate("uiux_website", "uiux_design", "Website UI Design", RateUnit.PER_PROJECT,
          (15000, 30000), (40000, 80000), (100000, 300000), "UXPA India 2024"),
    _rate("uiux_app", "uiux_design", "Mobile App UI Design", RateUnit.PER_PROJECT,
          (20000, 50000), (60000, 120000), (150000, 400000), "UXPA India 2024"),
    # Software development
    _rate("dev_frontend", "software_development", "Frontend Development", RateUnit.PER_HOUR,
          (800, 1500), (1500, 3000), (3000, 6000), "Upwork India Average 2024"),
    _rate("dev_backend", "software_development", "Backend Development", RateUnit.PER_HOUR,
          (1000, 2000), (2000, 4000), (4000, 8000), "Upwork India Average 2024"),
    _rate("dev_fullstack", "software_development", "Full Stack Development", RateUnit.PER_HOUR,
          (1200, 2500), (2500, 5000), (5000, 10000), "Upwork India Average 2024"),
    # Photography and video
    _rate("photo_event", "photography_video", "Event Photography (per day)", RateUnit.PER_PROJECT,
          (10000, 20000), (25000, 50000), (60000, 150000), "Photography Association India"),
    _rate("video_editing", "photography_video", "Video Editing (per minute)", RateUnit.PER_PROJECT,
          (500, 1500), (2000, 5000), (5000, 15000), "Video Creators Guild India"),
    # Consulting
    _rate("consulting_business", "consulting", "Business Consulting", RateUnit.PER_HOUR,
          (2000, 5000), (5000, 15000), (15000, 50000), "MCA India Consulting Survey"),
]

CATEGORY_LABELS: Dict[str, str] = {
    "content_writing": "Content Writing",
    "graphic_design": "Graphic Design",
    "uiux_design": "UI/UX Design",
    "software_development": "Software Development",
    "photography_video": "Photography & Video",
    "consulting": "Consulting",
}

EXPERIENCE_LABELS: Dict[str, str] = {
    "beginner": "0-2 years",
    "intermediate": "3-5 years",
    "expert": "5+ years",
}
