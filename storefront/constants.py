CART_KEY = "cart"
WISHLIST_KEY = "wishlist"

# промокоды: код -> фиксированная скидка (без суммирования)
PROMO_CODES = {
    "SAVE50": 50.0,
    "SAVE100": 100.0,
}

# если в снимке товара нет остатка
DEFAULT_STOCK = 10

CONFIRMATION_PATH = "/order-confirmation/{order_id}"

# знак валюты ставится перед суммой; для прочих кодов пишем код после суммы
CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
}
