"""
Admin claim tooling - Cloud Functions (Python)
Check and grant the admin custom claim over HTTP.
"""
import json
import logging
from flask import Flask, request

REGION = "asia-northeast3"

logger = logging.getLogger(__name__)

# Lazy init: keeps firebase_admin out of the deploy discovery path
_app = None


def get_app():
    global _app
    if _app is None:
        import firebase_admin
        if not firebase_admin._apps:
            firebase_admin.initialize_app()
        _app = firebase_admin.get_app()
    return _app


app = Flask(__name__)


def _cors_headers():
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "GET, PUT, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
    }


def _json_response(data, status=200):
    return (json.dumps(data, ensure_ascii=False, default=str), status, _cors_headers())


def _get_auth_header():
    return request.headers.get("Authorization") or ""


def _get_bearer_token():
    auth_header = _get_auth_header()
    if not auth_header.startswith("Bearer "):
        return ""
    return auth_header.split("Bearer ")[-1].strip()


def _get_decoded_token():
    """Verify Authorization: Bearer <idToken> and return the decoded payload, or None."""
    from firebase_admin import auth, exceptions
    get_app()
    token = _get_bearer_token()
    if not token:
        return None
    try:
        return auth.verify_id_token(token)
    except (exceptions.FirebaseError, ValueError):
        return None


def _get_admin_claim(uid):
    """admin custom claim for uid as stored on the Auth server."""
    from firebase_admin import auth, exceptions
    if not uid:
        return None
    try:
        user = auth.get_user(uid)
        return (user.custom_claims or {}).get("admin")
    except (exceptions.FirebaseError, ValueError):
        return None


def _require_admin(uid, decoded=None):
    """Token payload wins; falls back to the server-side custom claims."""
    if decoded is not None and decoded.get("admin"):
        return True
    return bool(_get_admin_claim(uid))


# ---------- claim check (any signed-in user) ----------

@app.route("/api/admin/check", methods=["GET", "OPTIONS"])
def admin_check():
    """Whether the caller is an admin, with the reason when the token is rejected."""
    from firebase_admin import auth as firebase_auth, exceptions
    if request.method == "OPTIONS":
        return ("", 204, _cors_headers())
    get_app()
    has_header = _get_auth_header().startswith("Bearer ")
    token_str = _get_bearer_token()
    decoded = None
    verify_error = None
    if token_str:
        try:
            decoded = firebase_auth.verify_id_token(token_str)
        except firebase_auth.ExpiredIdTokenError:
            verify_error = "Token expired. Sign out and sign in again."
        except firebase_auth.RevokedIdTokenError:
            verify_error = "Token revoked. Sign out and sign in again."
        except firebase_auth.InvalidIdTokenError:
            verify_error = "Token is invalid. It may belong to another Firebase project."
        except (exceptions.FirebaseError, ValueError) as e:
            verify_error = "Token verification failed: " + str(e)[:80]
    if not decoded:
        hint = verify_error if verify_error else (
            "Authorization header is malformed or empty." if has_header
            else "No Authorization header was sent."
        )
        return _json_response({"error": "Authentication required.", "hint": hint}, 401)
    uid = decoded.get("uid")
    return _json_response({
        "uid": uid,
        "admin": _require_admin(uid, decoded),
        "admin_claim": _get_admin_claim(uid),
        "admin_in_token": decoded.get("admin"),
    })


# ---------- claim grant/revoke (admins only) ----------

@app.route("/api/admin/users/<user_id>/claims", methods=["PUT", "OPTIONS"])
def admin_update_claims(user_id):
    from firebase_admin import auth, exceptions
    if request.method == "OPTIONS":
        return ("", 204, _cors_headers())
    decoded = _get_decoded_token()
    if not decoded:
        return _json_response({"error": "Authentication required."}, 401)
    uid = decoded.get("uid")
    if not _require_admin(uid, decoded):
        return _json_response({"error": "Admin privileges required."}, 403)
    data = request.get_json(silent=True) or {}
    is_admin = data.get("admin")
    if not isinstance(is_admin, bool):
        return _json_response({"error": "'admin' must be true or false."}, 400)
    logger.info("admin claim: user_id=%s admin=%s by=%s", user_id, is_admin, uid)
    try:
        auth.set_custom_user_claims(user_id, {"admin": is_admin})
        user = auth.get_user(user_id)
    except auth.UserNotFoundError:
        return _json_response({"error": "User not found."}, 404)
    except exceptions.FirebaseError as e:
        logger.warning("set_custom_user_claims failed for %s: %s", user_id, e)
        return _json_response({"error": "Failed to update claims."}, 500)
    logger.info("set_custom_user_claims ok: user_id=%s admin=%s", user_id, is_admin)
    return _json_response({"uid": user_id, "custom_claims": user.custom_claims or {}})


# ---------- Cloud Functions entry points ----------

def api(req):
    """Proxied from Firebase Hosting under /api/*, or called directly."""
    with app.request_context(req.environ):
        return app.full_dispatch_request()


try:
    from firebase_functions import https_fn
    from firebase_functions.options import CorsOptions

    @https_fn.on_request(
        cors=CorsOptions(cors_origins="*", cors_methods=["GET", "PUT", "OPTIONS"]),
        region=REGION,
    )
    def admin_api(req: https_fn.Request) -> https_fn.Response:
        with app.request_context(req.environ):
            return app.full_dispatch_request()
except ImportError:
    # local: flask run
    pass
