"""User-facing strings (Bahasa Indonesia)."""

INGREDIENTS_TOO_SHORT = "Sebutkan setidaknya satu bahan, misal: telur, nasi."
NO_COOKING_TOOLS = "Sebutkan setidaknya satu alat masak."

NO_RECIPES_FOUND = "Tidak ada resep yang ditemukan. Coba ganti bahan atau alatmu."
SUGGESTION_FAILED = "Maaf, terjadi kesalahan saat mencari resep. Silakan coba lagi nanti."

VOICE_ERROR_TITLE = "Voice Command Gagal"
VOICE_PERMISSION_TITLE = "Akses Mikrofon Ditolak"
VOICE_PERMISSION_DENIED = "Mohon izinkan akses mikrofon di pengaturan browser Anda."
VOICE_NO_SPEECH = "Tidak ada suara yang terdeteksi. Coba lagi."
VOICE_GENERIC_ERROR = "Terjadi kesalahan pada pengenalan suara."
VOICE_START_FAILED = "Tidak dapat memulai fitur rekam suara."
