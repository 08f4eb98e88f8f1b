import random

CATEGORY_TIPS: dict[str, list[str]] = {
    "Domestic": [
        "Keep building your skills! Consider taking a short course in professional cleaning techniques or childcare.",
        "Tip: Improve your communication skills by practicing basic English or local languages.",
        "Stand out: Get a reference letter from previous employers or community members who can vouch for your reliability.",
        "Next steps: Consider volunteering for community cleaning projects to build your experience.",
    ],
    "Retail": [
        "Boost your chances: Practice your customer service skills by role-playing with friends or family.",
        "Learn basic math and cash handling skills - many free online resources are available.",
        "Stand out: Take a free online course in retail management or sales techniques.",
        "Tip: Build your product knowledge by researching common retail items and their features.",
    ],
    "Farm": [
        "Grow your skills: Learn about modern farming techniques through agricultural extension services.",
        "Physical fitness matters: Maintain good health as farm work requires stamina.",
        "Knowledge is power: Study crop cycles, animal husbandry, or irrigation systems.",
        "Experience counts: Volunteer at community gardens to build practical skills.",
    ],
    "Catering": [
        "Level up: Practice basic cooking skills and learn new recipes at home.",
        "Hygiene first: Study food safety and hygiene standards - crucial for catering jobs.",
        "Time management: Practice preparing multiple dishes efficiently.",
        "Tip: Watch cooking tutorials and practice plating and presentation skills.",
    ],
    "Trade": [
        "Skill development: Consider apprenticeships or vocational training programs in your area.",
        "Practice makes perfect: Work on personal projects to build your portfolio.",
        "Stay current: Learn about new tools and techniques in your trade.",
        "Certification helps: Look into getting certified in your specific trade area.",
    ],
}

GENERAL_TIPS = [
    "Don't give up! Every rejection is a learning opportunity. Review your application and see what you can improve.",
    "Stay positive! The right opportunity is out there. Keep applying and improving your skills.",
    "Strengthen your application: Make sure your motivation clearly shows why you're a great fit.",
    "Target your applications: Apply for jobs that match your skills and experience level.",
]

OPENING = "Don't be discouraged! This is just one opportunity, and there are many more waiting for you."
CLOSING = "Remember: Every successful person has faced rejections. What matters is that you keep trying and learning!"


def rejection_advice(category: str | None, rng: random.Random | None = None) -> dict:
    tips = CATEGORY_TIPS.get(category or "", GENERAL_TIPS)
    tip = (rng or random).choice(tips)
    return {
        "category": category,
        "tip": tip,
        "message": f"{OPENING}\n\n{tip}\n\n{CLOSING}",
    }
