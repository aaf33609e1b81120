r"""
Grant the admin custom claim to a Firebase Auth user.

Usage:
  1. Firebase console > Project settings > Service accounts > "Generate new private key"
  2. Save the downloaded JSON next to this script as serviceAccountKey.json
     (or point SERVICE_ACCOUNT_KEY at it)
  3. From a terminal:
     cd functions
     venv\Scripts\activate
     python set_admin_claim.py                 # default uid
     python set_admin_claim.py <uid>
     python set_admin_claim.py user@example.com
  4. The user has to sign out and back in before the new claim shows up in their ID token.
"""
import sys
import os

# Service account key (serviceAccountKey.json in this folder)
KEY_PATH = os.path.join(os.path.dirname(__file__), "serviceAccountKey.json")

DEFAULT_UID = "TpNCuAqUFyMKLM8YK3ewzpMsIYJ3"

ADMIN_CLAIMS = {"admin": True}


def _key_path():
    return os.environ.get("SERVICE_ACCOUNT_KEY", "").strip() or KEY_PATH


def _resolve_uid(auth, target):
    """uid for the command line target. Anything with an @ is looked up as an email."""
    if not target:
        return DEFAULT_UID
    if "@" in target:
        return auth.get_user_by_email(target).uid
    return target


def main(argv=None):
    args = sys.argv[1:] if argv is None else argv
    target = args[0].strip() if args else ""
    key_path = _key_path()
    if not os.path.isfile(key_path):
        print("Service account key not found.")
        print("Firebase console > Project settings > Service accounts > 'Generate new private key'")
        print(f"Save the downloaded JSON file as {key_path}")
        sys.exit(1)
    os.environ.setdefault("GOOGLE_APPLICATION_CREDENTIALS", key_path)
    import firebase_admin
    from firebase_admin import credentials, auth
    # Remote failures are printed; the exit code is left to the interpreter.
    try:
        if not firebase_admin._apps:
            firebase_admin.initialize_app(credentials.Certificate(key_path))
        uid = _resolve_uid(auth, target)
        auth.set_custom_user_claims(uid, ADMIN_CLAIMS)
    except auth.UserNotFoundError:
        print(f"No user found for: {target or DEFAULT_UID}")
        return
    except Exception as e:
        print(f"Failed to set admin claim: {e}")
        return
    print(f"Admin claim set! (uid: {uid})")
    # confirm
    try:
        user = auth.get_user(uid)
        print(f"custom_claims = {user.custom_claims}")
    except Exception as e:
        print(f"Could not re-read claims: {e}")
    print("Sign out and back in with that account to refresh the ID token.")
    sys.exit(0)


if __name__ == "__main__":
    main()
