# storefront/forms.py
"""
Form state controller shared by the profile, credentials, product,
login and register forms.

    VIEWING --begin_edit--> EDITING --submit--> SUBMITTING
       ^                      |  ^                  |
       +-------cancel---------+  +----failure-------+
       ^                                            |
       +------------------success-------------------+

The draft is a plain dict copied out of the committed entity; it only
replaces the committed value through a successful backend response.
"""
import dataclasses
import logging
from enum import Enum
from typing import Any, Callable, Dict, Generic, Iterable, Optional, Tuple, TypeVar

from .errors import StorefrontError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FormState(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"
    SUBMITTING = "submitting"


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


class FormController(Generic[T]):
    def __init__(
        self,
        committed: Optional[T],
        submit: Callable[[Dict[str, Any]], T],
        initial: Optional[Callable[[Optional[T]], Dict[str, Any]]] = None,
        required: Iterable[str] = (),
        confirm: Optional[Tuple[str, str]] = None,
        on_success: Optional[Callable[[T], None]] = None,
        name: str = "form",
        mismatch_message: str = "Passwords do not match",
    ):
        self.committed = committed
        self._submit = submit
        self._initial = initial
        self.required = tuple(required)
        self.confirm = confirm
        self.on_success = on_success
        self.name = name
        self.mismatch_message = mismatch_message

        self.state = FormState.VIEWING
        self.draft: Optional[Dict[str, Any]] = None
        self.error: Optional[StorefrontError] = None
        self.field_errors: Dict[str, str] = {}

    # ----- helpers -----
    def _fresh_draft(self) -> Dict[str, Any]:
        if self._initial is not None:
            return dict(self._initial(self.committed))
        if self.committed is not None and hasattr(self.committed, "form_fields"):
            return dict(self.committed.form_fields())
        return {}

    @property
    def is_editing(self) -> bool:
        return self.state is not FormState.VIEWING

    @property
    def is_submitting(self) -> bool:
        return self.state is FormState.SUBMITTING

    # ----- transitions -----
    def begin_edit(self) -> Dict[str, Any]:
        if self.state is FormState.VIEWING:
            self.draft = self._fresh_draft()
            self.error = None
            self.field_errors = {}
            self.state = FormState.EDITING
        return self.draft

    def set_field(self, name: str, value: Any) -> None:
        if self.state is not FormState.EDITING:
            raise RuntimeError(f"{self.name} is not being edited")
        self.draft[name] = value
        self.field_errors.pop(name, None)

    def update(self, values: Dict[str, Any]) -> None:
        for name, value in values.items():
            self.set_field(name, value)

    def cancel(self) -> bool:
        if self.state is not FormState.EDITING:
            return False
        self.draft = None
        self.error = None
        self.field_errors = {}
        self.state = FormState.VIEWING
        return True

    def validate(self) -> Dict[str, str]:
        errors = {}
        for name in self.required:
            if _is_blank(self.draft.get(name)):
                errors[name] = "This field is required"
        if self.confirm is not None:
            first, second = self.confirm
            if self.draft.get(first) != self.draft.get(second):
                errors[second] = self.mismatch_message
        return errors

    def submit(self) -> Optional[T]:
        """
        Validate and send the draft. Returns the new committed value on
        success, ``None`` when the submit was rejected, ignored or failed;
        ``error`` and ``field_errors`` say which.
        """
        if self.state is FormState.SUBMITTING:
            logger.debug("Ignoring %s submit while one is in flight", self.name)
            return None
        if self.state is not FormState.EDITING:
            return None

        errors = self.validate()
        if errors:
            self.field_errors = errors
            self.error = ValidationError(errors)
            return None

        self.state = FormState.SUBMITTING
        self.error = None
        self.field_errors = {}
        try:
            result = self._submit(dict(self.draft))
        except StorefrontError as e:
            logger.warning("%s submit failed: %s", self.name, e)
            self.error = e
            self.state = FormState.EDITING
            return None
        except Exception:
            self.state = FormState.EDITING
            raise

        self.committed = result
        self.draft = None
        self.state = FormState.VIEWING
        if self.on_success is not None:
            self.on_success(result)
        return result


# -------------------------
# Concrete forms
# -------------------------
def _pick(draft: Dict[str, Any], names: Iterable[str]) -> Dict[str, Any]:
    return {n: draft.get(n) for n in names}


PROFILE_FIELDS = ("name", "biography", "phone")
CREDENTIAL_FIELDS = ("email", "username", "current_password", "new_password")
PRODUCT_FIELDS = (
    "name", "description", "materials", "dimensions",
    "cultural_significance", "price", "category_id", "region_id",
)
REGISTER_FIELDS = ("username", "email", "phone", "password", "name", "biography", "region_id")


def profile_form(api, artisan, on_success=None) -> FormController:
    def submit(draft):
        return api.update_artisan(form.committed.id, _pick(draft, PROFILE_FIELDS), image=draft.get("image"))

    form = FormController(
        artisan, submit,
        initial=lambda a: {**a.form_fields(), "image": None},
        required=("name", "phone"),
        on_success=on_success, name="profile form",
    )
    return form


def credentials_form(api, artisan, on_success=None) -> FormController:
    def initial(a):
        return {
            "email": (a.email if a else "") or "",
            "username": "",
            "current_password": "",
            "new_password": "",
            "confirm_password": "",
        }

    def submit(draft):
        current = form.committed
        api.change_credentials(current.id, _pick(draft, CREDENTIAL_FIELDS))
        api.session.remember_email(draft["email"])
        return dataclasses.replace(current, email=draft["email"])

    form = FormController(
        artisan, submit, initial=initial,
        required=("email", "username", "current_password", "new_password", "confirm_password"),
        confirm=("new_password", "confirm_password"),
        on_success=on_success, name="credentials form",
        mismatch_message="New passwords do not match",
    )
    return form


def product_form(api, artisan_id: int, product=None, on_success=None) -> FormController:
    """Create form when ``product`` is None, edit form otherwise."""

    def initial(p):
        if p is not None:
            return p.form_fields()
        return {name: "" for name in PRODUCT_FIELDS} | {"image": None}

    def submit(draft):
        fields = _pick(draft, PRODUCT_FIELDS)
        if product is None:
            fields["artisan_id"] = artisan_id
            return api.create_product(fields, image=draft.get("image"))
        return api.update_product(product.id, fields, image=draft.get("image"))

    return FormController(
        product, submit, initial=initial,
        required=("name", "description", "price", "category_id", "region_id"),
        on_success=on_success, name="product form",
    )


def login_form(api, on_success=None) -> FormController:
    return FormController(
        None, lambda draft: api.login(draft["username"].strip(), draft["password"]),
        initial=lambda _: {"username": "", "password": ""},
        required=("username", "password"),
        on_success=on_success, name="login form",
    )


def register_form(api, on_success=None) -> FormController:
    def initial(_):
        return {name: "" for name in REGISTER_FIELDS} | {"confirm_password": "", "image": None}

    return FormController(
        None, lambda draft: api.register(_pick(draft, REGISTER_FIELDS), image=draft.get("image")),
        initial=initial,
        required=REGISTER_FIELDS + ("confirm_password",),
        confirm=("password", "confirm_password"),
        on_success=on_success, name="register form",
    )
