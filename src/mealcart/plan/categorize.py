"""Grocery department lookup for ingredient names."""

from collections.abc import Callable
from enum import Enum

from mealcart.normalize.units import normalize_ingredient_name


class Category(str, Enum):
    """Grocery store departments, in the order a list is printed."""

    PRODUCE = "Produce"
    DAIRY = "Dairy"
    MEAT = "Meat"
    PANTRY = "Pantry"
    FROZEN = "Frozen"
    BAKERY = "Bakery"
    OTHER = "Other"


# Any name -> Category function can stand in for the keyword tables
CategoryLookup = Callable[[str], Category]


PRODUCE: frozenset[str] = frozenset(
    {
        # Vegetables
        "tomato", "tomatoes", "onion", "onions", "red onion", "shallot", "shallots",
        "garlic", "lettuce", "carrot", "carrots", "celery", "bell pepper",
        "bell peppers", "cucumber", "cucumbers", "zucchini", "broccoli",
        "cauliflower", "spinach", "kale", "cabbage", "potato", "potatoes",
        "sweet potato", "sweet potatoes", "mushroom", "mushrooms", "green beans",
        "peas", "corn", "avocado", "avocados", "eggplant", "squash", "leek",
        "leeks", "jalapeño", "jalapeno", "ginger", "scallions", "green onions",
        # Herbs
        "cilantro", "parsley", "basil", "mint", "thyme", "rosemary", "dill",
        # Fruits
        "apple", "apples", "banana", "bananas", "orange", "oranges", "lemon",
        "lemons", "lime", "limes", "strawberry", "strawberries", "blueberry",
        "blueberries", "raspberry", "raspberries", "grape", "grapes", "mango",
        "mangoes", "pineapple", "watermelon", "pear", "pears",
    }
)  # fmt: skip

DAIRY: frozenset[str] = frozenset(
    {
        "milk", "whole milk", "cream", "heavy cream", "whipping cream",
        "sour cream", "butter", "cheese", "cheddar cheese", "mozzarella cheese",
        "mozzarella", "parmesan cheese", "parmesan", "feta cheese", "feta",
        "goat cheese", "cream cheese", "yogurt", "greek yogurt",
        "cottage cheese", "ricotta cheese", "ricotta", "egg", "eggs",
    }
)  # fmt: skip

MEAT: frozenset[str] = frozenset(
    {
        # Poultry
        "chicken", "chicken breast", "chicken breasts", "chicken thigh",
        "chicken thighs", "turkey", "duck",
        # Beef
        "beef", "ground beef", "steak", "brisket", "roast",
        # Pork
        "pork", "bacon", "ham", "sausage", "sausages", "pork chop", "pork chops",
        # Seafood
        "fish", "salmon", "tuna", "cod", "tilapia", "shrimp", "prawns",
        "lobster", "crab", "scallops",
        # Other
        "lamb", "veal",
    }
)  # fmt: skip

PANTRY: frozenset[str] = frozenset(
    {
        # Grains & pasta
        "flour", "all-purpose flour", "bread flour", "rice", "white rice",
        "brown rice", "pasta", "spaghetti", "penne", "noodles", "oats",
        "quinoa", "couscous",
        # Baking
        "sugar", "brown sugar", "powdered sugar", "baking powder",
        "baking soda", "yeast", "vanilla extract", "cocoa powder",
        "chocolate chips", "cornstarch",
        # Oils & condiments
        "oil", "olive oil", "vegetable oil", "coconut oil", "sesame oil",
        "vinegar", "balsamic vinegar", "soy sauce", "worcestershire sauce",
        "ketchup", "mustard", "mayonnaise", "hot sauce",
        # Spices
        "salt", "pepper", "black pepper", "paprika", "cumin", "coriander",
        "turmeric", "cinnamon", "nutmeg", "oregano", "chili powder",
        "cayenne pepper", "garlic powder", "onion powder",
        # Canned & jarred
        "tomato sauce", "tomato paste", "canned tomatoes", "chicken broth",
        "beef broth", "vegetable broth", "coconut milk", "beans", "black beans",
        "kidney beans", "chickpeas", "lentils", "peanut butter", "jam",
        "honey", "maple syrup",
        # Nuts & seeds
        "almonds", "walnuts", "pecans", "cashews", "peanuts",
        "sunflower seeds", "chia seeds", "sesame seeds",
    }
)  # fmt: skip

FROZEN: frozenset[str] = frozenset(
    {
        "frozen vegetables", "frozen peas", "frozen corn", "frozen broccoli",
        "frozen berries", "frozen strawberries", "frozen blueberries",
        "ice cream", "frozen pizza", "frozen french fries",
    }
)  # fmt: skip

BAKERY: frozenset[str] = frozenset(
    {
        "bread", "baguette", "ciabatta", "sourdough", "whole wheat bread",
        "tortilla", "tortillas", "pita bread", "pita", "bagel", "bagels",
        "croissant", "croissants", "bun", "buns", "hamburger buns",
        "hot dog buns", "rolls",
    }
)  # fmt: skip

# Checked in this order; the first table containing the name wins
CATEGORY_TABLES: tuple[tuple[Category, frozenset[str]], ...] = (
    (Category.PRODUCE, PRODUCE),
    (Category.DAIRY, DAIRY),
    (Category.MEAT, MEAT),
    (Category.PANTRY, PANTRY),
    (Category.FROZEN, FROZEN),
    (Category.BAKERY, BAKERY),
)


def _lookup(name: str) -> Category | None:
    for category, keywords in CATEGORY_TABLES:
        if name in keywords:
            return category
    return None


def _candidates(name: str) -> list[str]:
    """Names to try, most specific first."""
    candidates = [name]
    if name.endswith("es"):
        candidates.append(name[:-2])
    if name.endswith("s"):
        candidates.append(name[:-1])

    words = name.split()
    if len(words) > 1:
        head = words[-1]
        candidates.append(head)
        if head.endswith("s"):
            candidates.append(head[:-1])
    return candidates


def categorize(ingredient_name: str) -> Category:
    """
    Categorize an ingredient by name.

    Tries the exact name first, then anything sold frozen, then the singular
    form and finally the head noun ("cherry tomatoes" -> "tomatoes"). Names
    that match nothing fall back to ``Category.OTHER``.
    """
    name = normalize_ingredient_name(ingredient_name)
    if not name:
        return Category.OTHER

    exact = _lookup(name)
    if exact is not None:
        return exact

    if name.startswith("frozen "):
        return Category.FROZEN

    for candidate in _candidates(name)[1:]:
        category = _lookup(candidate)
        if category is not None:
            return category

    return Category.OTHER
