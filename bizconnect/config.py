# bizconnect.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du BFF BizConnect.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Expose l'URL de l'API REST (vérification paiement, création de commandes)
- Expose Redis (stockage par origine navigateur, garde de matérialisation, rate limit)
- Délais des vérifications différées (callback: 2s, bannière: 3s)
- Sécurité cookies, CORS/hosts
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _env_flag(name: str, default: str = "false") -> bool:
    return _clean_env(os.getenv(name, default)).lower() in ("1", "true", "yes")

def _env_float(name: str, default: float) -> float:
    try:
        return float(_clean_env(os.getenv(name, "")) or default)
    except ValueError:
        return default

# API REST (boîte noire): /api/payments/verify et /api/orders
# - API_BASE_URL peut être fourni sans schéma: on préfixe en http:// si nécessaire
API_BASE_URL = _clean_env(os.getenv("API_BASE_URL") or "http://localhost:5000")
if API_BASE_URL and not API_BASE_URL.startswith("http"):
    API_BASE_URL = "http://" + API_BASE_URL
API_BASE_URL = API_BASE_URL.rstrip("/")
API_TOKEN = _clean_env(os.getenv("API_TOKEN") or "")
API_TIMEOUT_SECONDS = _env_float("API_TIMEOUT_SECONDS", 10.0)

# Redis: enregistrements par origine navigateur + notifications + garde
REDIS_URL = _clean_env(os.getenv("REDIS_URL") or os.getenv("RATE_LIMIT_REDIS_URL") or "redis://127.0.0.1:6379/0")
STORAGE_KEY_PREFIX = _clean_env(os.getenv("STORAGE_KEY_PREFIX") or "bizconnect")

# Vérifications différées (secondes)
CALLBACK_FALLBACK_DELAY_SECONDS = _env_float("CALLBACK_FALLBACK_DELAY_SECONDS", 2.0)
NOTICE_DELAY_SECONDS = _env_float("NOTICE_DELAY_SECONDS", 3.0)

# Garde anti double matérialisation (SET NX par référence)
# MATERIALIZATION_GUARD=false rétablit le comportement historique (double création possible)
MATERIALIZATION_GUARD = _env_flag("MATERIALIZATION_GUARD", "true")
MATERIALIZATION_GUARD_TTL_SECONDS = int(_env_float("MATERIALIZATION_GUARD_TTL_SECONDS", 86400))

# Cookies / session: l'identifiant d'origine vit dans la session signée
SESSION_SECRET_KEY = _clean_env(os.getenv("SESSION_SECRET_KEY") or "replace_me_with_a_long_random_secret")
SESSION_COOKIE_NAME = _clean_env(os.getenv("SESSION_COOKIE_NAME") or "bc_session")
COOKIE_SECURE = _env_flag("COOKIE_SECURE", "false")

# CORS (SPA servie sur une autre origine en dev)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]
