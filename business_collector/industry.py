"""Map user-friendly categories onto search phrasings that Places understands."""

from __future__ import annotations

from typing import List


INDUSTRY_MAPPINGS = {
    # Home & property services
    "lawn care": "lawn care service",
    "landscaping": "landscaping company",
    "tree trimming": "tree service",
    "tree removal": "tree removal service",
    "pool cleaning": "pool cleaning service",
    "pool maintenance": "pool maintenance service",
    "pest control": "pest control service",
    "pressure washing": "pressure washing service",
    "roofing": "roofing contractor",
    "gutter": "gutter cleaning service",
    "gutter services": "gutter installation and repair",
    "painting": "painting contractor",
    "painter": "painting contractor",
    "plumbing": "plumber",
    "plumber": "plumber",
    "electrical": "electrician",
    "electrician": "electrician",
    "hvac": "HVAC contractor",
    "air conditioning": "air conditioning contractor",
    "heating": "heating contractor",
    "garage door": "garage door repair",
    "handyman": "handyman service",
    "flooring": "flooring contractor",
    "tile installation": "tile contractor",
    "fence installation": "fence contractor",
    "fence repair": "fence repair service",
    "carpet cleaning": "carpet cleaning service",
    "window cleaning": "window cleaning service",
    "junk removal": "junk removal service",
    "home remodeling": "home remodeling contractor",
    "renovation": "home renovation contractor",
    "cleaning": "cleaning service",
    "appliance repair": "appliance repair service",
    # Real estate & housing
    "real estate agent": "real estate agent",
    "realtor": "real estate agent",
    "property manager": "property management company",
    "apartment": "apartment complex",
    "home inspector": "home inspection service",
    "mortgage": "mortgage lender",
    "loan officer": "mortgage broker",
    "title company": "title company",
    "real estate photographer": "real estate photography service",
    "drone operator": "drone photography service",
    # Health, wellness & personal care
    "chiropractor": "chiropractor",
    "dentist": "dentist",
    "orthodontist": "orthodontist",
    "physical therapist": "physical therapy clinic",
    "massage": "massage therapist",
    "med spa": "medical spa",
    "hair salon": "hair salon",
    "barbershop": "barber shop",
    "nail salon": "nail salon",
    "personal trainer": "personal trainer",
    "gym": "gym",
    "fitness": "fitness center",
    "nutritionist": "nutritionist",
    "dietician": "dietitian",
    "counseling": "counseling service",
    "therapy": "therapist",
    # Professional services
    "insurance agent": "insurance agency",
    "financial advisor": "financial planner",
    "accountant": "accounting firm",
    "tax preparer": "tax preparation service",
    "lawyer": "law firm",
    "attorney": "attorney",
    "legal": "legal services",
    "notary": "notary public",
    "consultant": "business consultant",
    "coach": "business coach",
    # Auto & transportation
    "auto repair": "auto repair shop",
    "car repair": "auto repair shop",
    "car detailing": "auto detailing service",
    "mechanic": "auto repair shop",
    "mobile mechanic": "mobile mechanic",
    "towing": "towing service",
    "car dealer": "car dealership",
    "driving school": "driving school",
    "auto glass": "auto glass repair",
    # Events & lifestyle
    "wedding planner": "wedding planner",
    "photographer": "photographer",
    "videographer": "videography service",
    "dj": "DJ service",
    "entertainment": "entertainment service",
    "caterer": "catering service",
    "food truck": "food truck",
    "party rental": "party equipment rental",
    "event venue": "event venue",
    "florist": "florist",
    # Pets
    "dog groomer": "dog grooming service",
    "pet grooming": "pet grooming service",
    "veterinarian": "veterinarian",
    "vet": "veterinarian",
    "pet boarding": "pet boarding service",
    "dog training": "dog trainer",
    # Medical providers
    "clinic": "medical clinic",
    "medical billing": "medical billing service",
    "home health": "home health care service",
    "optometrist": "optometrist",
    "eye clinic": "eye care center",
    "dental office": "dental clinic",
    "speech therapy": "speech therapist",
    "occupational therapy": "occupational therapist",
    # Education
    "tutor": "tutoring service",
    "test prep": "test preparation center",
    "childcare": "childcare center",
    "preschool": "preschool",
    "daycare": "day care center",
    "art school": "art school",
    "music school": "music school",
    # Service trades
    "cleaning company": "cleaning service",
    "security": "security service",
    "delivery service": "delivery service",
    "courier": "courier service",
    "staffing": "staffing agency",
    # Technology & marketing
    "web design": "web design agency",
    "marketing": "marketing agency",
    "it support": "IT services",
    "msp": "managed IT services",
    "seo": "SEO service",
    "social media": "social media marketing",
    # Construction & B2B trades
    "general contractor": "general contractor",
    "contractor": "general contractor",
    "excavation": "excavation contractor",
    "concrete": "concrete contractor",
    "welding": "welding service",
    "equipment rental": "equipment rental service",
    "plumbing supply": "plumbing supply store",
    "hvac supply": "HVAC supply store",
    "electrical supply": "electrical supply store",
}

_SERVICE_WORDS = ("service", "company", "contractor", "agent", "firm")


def optimize_search_query(category: str, location: str) -> str:
    """Build a ``"<phrase> in <location>"`` query for a category."""

    lowered = category.lower().strip()

    mapped = INDUSTRY_MAPPINGS.get(lowered)
    if mapped:
        return f"{mapped} in {location}"

    if lowered:
        for key, value in INDUSTRY_MAPPINGS.items():
            if key in lowered or lowered in key:
                return f"{value} in {location}"

    if not any(word in lowered for word in _SERVICE_WORDS):
        return f"{category.strip()} service in {location}"
    return f"{category.strip()} in {location}"


def get_supported_industries() -> List[str]:
    return sorted(INDUSTRY_MAPPINGS)


def get_industry_suggestions(partial: str, limit: int = 10) -> List[str]:
    lowered = partial.lower().strip()
    return [key for key in INDUSTRY_MAPPINGS if lowered in key][:limit]
