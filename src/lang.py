STRINGS = {
    "EN": {
        "title": "Users",
        "menu_users": "Users",
        "sidebar_title": "Menu",
        "settings": "Settings",
        "loading_users": "Loading users...",
        "error_prefix": "Error",
        "fetch_failed": "Failed to fetch users",
        "create_failed": "Failed to create user",
        "no_users": "No users found.",
        "page_of": "Page {page} of {total}",
        "previous": "Previous",
        "next": "Next",
        "add_new_user": "Add New User",
        "name": "Name",
        "surname": "Surname",
        "email": "Email",
        "nickname": "Nickname",
        "password": "Password",
        "add_user": "Add User",
        "required_fields": "Name, surname, email and password are required.",
        "invalid_email": "Please enter a valid email address.",
        "api_stats": "API calls",
        "api_rate": "API calls / min",
        "api_errors": "API errors",
    },
    "TR": {
        "title": "Kullanıcılar",
        "menu_users": "Kullanıcılar",
        "sidebar_title": "Menü",
        "settings": "Ayarlar",
        "loading_users": "Kullanıcılar yükleniyor...",
        "error_prefix": "Hata",
        "fetch_failed": "Kullanıcılar alınamadı",
        "create_failed": "Kullanıcı oluşturulamadı",
        "no_users": "Kullanıcı bulunamadı.",
        "page_of": "Sayfa {page} / {total}",
        "previous": "Önceki",
        "next": "Sonraki",
        "add_new_user": "Yeni Kullanıcı Ekle",
        "name": "Ad",
        "surname": "Soyad",
        "email": "E-posta",
        "nickname": "Takma Ad",
        "password": "Şifre",
        "add_user": "Kullanıcı Ekle",
        "required_fields": "Ad, soyad, e-posta ve şifre gereklidir.",
        "invalid_email": "Lütfen geçerli bir e-posta adresi girin.",
        "api_stats": "API çağrıları",
        "api_rate": "API çağrısı / dk",
        "api_errors": "API hataları",
    },
}

DEFAULT_LANG = "EN"


def get_text(lang, key):
    """Look up a UI string, falling back to English and then to the key itself."""
    table = STRINGS.get(lang) or STRINGS[DEFAULT_LANG]
    if key in table:
        return table[key]
    return STRINGS[DEFAULT_LANG].get(key, key)
