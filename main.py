"""Simple entrypoint to run a Stylisto recommendation locally."""

from datetime import date

from logic.validation import ClothingItemInput, RecommendationRequest, WeatherInput
from stylisto_app.app import StylistoApp
from stylisto_app.config import StylistoConfig

DEMO_USER = "demo-user"
DEMO_WARDROBE = [
    {"id": "demo-top", "name": "White Oxford Shirt", "category": "tops", "color": "#FFFFFF",
     "occasion": ["work", "casual"], "tags": ["classic"]},
    {"id": "demo-tee", "name": "Navy Tee", "category": "tops", "color": "#1F2A44",
     "occasion": ["casual"], "tags": ["casual"]},
    {"id": "demo-chinos", "name": "Stone Chinos", "category": "bottoms", "color": "#C8B79E",
     "occasion": ["work", "casual"], "tags": ["classic"]},
    {"id": "demo-jeans", "name": "Dark Jeans", "category": "bottoms", "color": "#23395B",
     "occasion": ["casual"], "tags": ["casual"]},
    {"id": "demo-loafers", "name": "Brown Loafers", "category": "shoes", "color": "#6B4226",
     "occasion": ["work"], "tags": ["classic"]},
    {"id": "demo-blazer", "name": "Grey Blazer", "category": "outerwear", "color": "#808080",
     "occasion": ["work"], "tags": ["business"]},
]


def main() -> None:
    app = StylistoApp(StylistoConfig.from_env())
    for item in DEMO_WARDROBE:
        app.add_item(ClothingItemInput(user_id=DEMO_USER, **item))

    response = app.recommend(
        RecommendationRequest(
            user_id=DEMO_USER,
            occasion="work",
            target_date=date.today(),
            weather=WeatherInput(temperature=14, condition="cloudy"),
            max_results=3,
        )
    )
    for outfit in response["outfits"]:
        card = outfit["card"]
        names = [item["name"] for item in outfit["items"]]
        print(f"{card['match_score']}% {', '.join(names)}")
        print(f"    {card['styling_description']}")


if __name__ == "__main__":
    main()
