"""Identity supplied by the upstream auth proxy.

The managed auth service sits in front of the app and forwards the signed-in
user as request headers. Flask-Login turns those headers into
``current_user``; whether that user may use the site, and whether they are an
admin, is decided by the ``ApprovedUser`` guest list.
"""
from functools import wraps

from flask import current_app, jsonify
from flask_login import UserMixin, current_user, login_required

from squares_party import login_manager
from squares_party.errors import NotApproved, NotFound, Unauthenticated
from squares_party.models import ApprovedUser


class Identity(UserMixin):
    def __init__(self, user_id, email, name=None, image=None):
        self.user_id = user_id
        self.email = email
        self.provider_name = name
        self.provider_image = image
        self._approved_user = None
        self._approved_loaded = False

    def get_id(self):
        return self.email

    @property
    def approved_user(self):
        if not self._approved_loaded:
            self._approved_user = ApprovedUser.query.filter_by(email=self.email).first()
            self._approved_loaded = True
        return self._approved_user

    def refresh(self):
        self._approved_loaded = False

    @property
    def is_approved(self):
        return self.approved_user is not None

    @property
    def is_admin(self):
        return bool(self.approved_user and self.approved_user.is_admin)

    @property
    def name(self):
        if self.approved_user and self.approved_user.name:
            return self.approved_user.name
        return self.provider_name

    @property
    def image(self):
        if self.approved_user and self.approved_user.custom_image:
            return self.approved_user.custom_image
        return self.provider_image

    @property
    def display_name(self):
        return self.name or self.email

    def to_dict(self):
        return {
            'id': self.user_id,
            'email': self.email,
            'name': self.name,
            'image': self.image,
            'is_approved': self.is_approved,
            'is_admin': self.is_admin,
        }


@login_manager.request_loader
def load_user_from_request(req):
    cfg = current_app.config
    email = (req.headers.get(cfg['AUTH_EMAIL_HEADER']) or '').strip().lower()
    if not email:
        return None
    return Identity(
        user_id=req.headers.get(cfg['AUTH_ID_HEADER']) or email,
        email=email,
        name=req.headers.get(cfg['AUTH_NAME_HEADER']) or None,
        image=req.headers.get(cfg['AUTH_IMAGE_HEADER']) or None,
    )


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify(Unauthenticated().to_dict()), Unauthenticated.status_code


def approved_required(view):
    """Signed in (401 otherwise) and on the guest list (403 otherwise)."""
    @login_required
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not current_user.is_approved:
            current_app.logger.warning(f"[auth] unapproved user {current_user.email}")
            raise NotApproved()
        return view(*args, **kwargs)
    return wrapped


def admin_required(view):
    """Site admins only. Everyone else gets a 404 so the route stays hidden."""
    @approved_required
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not current_user.is_admin:
            current_app.logger.warning(f"[auth] non-admin {current_user.email} tried {view.__name__}")
            raise NotFound()
        return view(*args, **kwargs)
    return wrapped
