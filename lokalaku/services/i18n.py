TRANSLATIONS = {
    "id": {
        "language_name": "Bahasa Indonesia",
        "coordinate_label": "Koordinat",
        "period_morning": "Pagi",
        "period_noon": "Siang",
        "period_afternoon": "Sore",
        "period_night": "Malam",
        "nearest_vendor": "Pedagang Terdekat",
        "explore_item": "Jelajahi area sekitar",
        "explore_reason": "Belum ada pedagang terdekat saat ini",
        "rain_item": "Gorengan & Teh Hangat",
        "rain_reason": "Cuaca hujan, cocok dengan makanan hangat",
        "hot_item": "Es Teh/Es Jeruk",
        "hot_reason": "Cuaca panas ({temp} derajat), minuman dingin sangat menyegarkan",
        "cool_item": "Kopi/Teh Hangat",
        "cool_reason": "Cuaca sejuk ({temp} derajat), minuman hangat pas untuk menghangatkan badan",
        "default_item": "Es Teh Manis",
        "default_reason": "Cuaca nyaman untuk minuman segar",
        "insight_message": "Selamat {period}! Coba keliling ke area perumahan atau tongkrongan terdekat.",
        "insight_target": "Area Perumahan/Taman",
        "market_saturated": "Tidak dapat menganalisa data saat ini",
        "market_opportunity": "Cobalah berjualan minuman segar atau camilan ringan",
        "market_strategy": "Fokus pada pelayanan yang ramah dan kebersihan",
    },
    "en": {
        "language_name": "English",
        "coordinate_label": "Coordinates",
        "period_morning": "Morning",
        "period_noon": "Noon",
        "period_afternoon": "Afternoon",
        "period_night": "Night",
        "nearest_vendor": "Nearest vendor",
        "explore_item": "Explore the area",
        "explore_reason": "No vendors are trading nearby right now",
        "rain_item": "Fried snacks & hot tea",
        "rain_reason": "It is raining, warm food fits the weather",
        "hot_item": "Iced tea/Iced orange",
        "hot_reason": "Hot weather ({temp} degrees), a cold drink is very refreshing",
        "cool_item": "Hot coffee/tea",
        "cool_reason": "Cool weather ({temp} degrees), a hot drink warms you up",
        "default_item": "Sweet iced tea",
        "default_reason": "Pleasant weather for a refreshing drink",
        "insight_message": "Good {period}! Try roaming around nearby housing areas or hangout spots.",
        "insight_target": "Housing area/Park",
        "market_saturated": "The market cannot be analyzed right now",
        "market_opportunity": "Try selling fresh drinks or light snacks",
        "market_strategy": "Focus on friendly service and cleanliness",
    },
}

def get_translations(lang: str = "id") -> dict:
    # Basic fallback
    if lang not in TRANSLATIONS:
        lang = "id"
    return TRANSLATIONS[lang]
