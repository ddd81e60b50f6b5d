"""Product categorization for colmado line items.

Descriptions are matched against Spanish and English keywords (plus common
Dominican brand names). Rules are checked in order and the first match wins,
so "crema dental" lands in bakery_dairy through "crema" before personal_care
is reached.
"""

from __future__ import annotations

CATEGORY_RULES: list[tuple[str, tuple[str, ...]]] = [
    (
        "alcohol",
        (
            "cerveza", "beer", "brandy", "ron", "whisky", "vodka", "vino", "wine",
            "presidente", "bohemia", "brugal", "barcelo",
        ),
    ),
    (
        "staples",
        (
            "arroz", "rice", "habichuela", "frijol", "beans", "azucar", "sugar",
            "aceite", "oil", "harina", "flour", "sal", "salt", "pasta", "spaghetti",
        ),
    ),
    (
        "bakery_dairy",
        (
            "pan", "bread", "queso", "cheese", "mantequilla", "butter", "huevo", "egg",
            "leche", "milk", "yogurt", "yogur", "crema", "cream",
        ),
    ),
    (
        "household",
        (
            "jabon", "soap", "detergente", "detergent", "papel", "toilet paper",
            "servilleta", "cloro", "bleach", "suavizante", "softener", "escoba",
            "broom", "fabuloso", "mistolin",
        ),
    ),
    (
        "snacks",
        (
            "dorito", "chips", "snack", "galleta", "cookie", "chocolate", "dulce",
            "candy", "cheetos", "ruffles", "oreo", "biscuit",
        ),
    ),
    (
        "beverages",
        (
            "refresco", "soda", "jugo", "juice", "agua", "water", "coca", "pepsi",
            "sprite", "fanta", "gatorade", "energia", "energy",
        ),
    ),
    (
        "fresh",
        (
            "platano", "banana", "tomate", "tomato", "cebolla", "onion", "lechuga",
            "lettuce", "ajo", "garlic", "aguacate", "avocado", "yuca", "papa",
            "potato", "limon", "lemon", "lime",
        ),
    ),
    (
        "protein",
        (
            "pollo", "chicken", "carne", "meat", "beef", "cerdo", "pork", "salami",
            "salchicha", "sausage", "jamon", "ham", "pescado", "fish", "atun", "tuna",
        ),
    ),
    (
        "tobacco",
        ("cigarro", "cigarette", "marlboro", "nacional", "tabaco", "tobacco"),
    ),
    (
        "personal_care",
        (
            "shampoo", "champu", "desodorante", "deodorant", "crema dental",
            "toothpaste", "cepillo", "toothbrush", "pañal", "diaper",
        ),
    ),
]

OTHER_CATEGORY = "other"

CATEGORIES = [name for name, _ in CATEGORY_RULES] + [OTHER_CATEGORY]


def categorize_product(description: str) -> str:
    """Map a product description to a standard category.

    Matching is substring-based and case-insensitive.

    Args:
        description: Receipt description, e.g. "Cerveza Presidente 12oz".

    Returns:
        Category name from CATEGORIES ("other" when nothing matches).

    Examples:
        >>> categorize_product("Cerveza Presidente Grande")
        'alcohol'
        >>> categorize_product("Arroz Selecto 5lb")
        'staples'
        >>> categorize_product("Tornillo 3/4")
        'other'
    """
    desc = description.lower()
    for category, keywords in CATEGORY_RULES:
        if any(keyword in desc for keyword in keywords):
            return category
    return OTHER_CATEGORY
