"""Profile and permission factories."""

from polyfactory import Use

from src.identity.models import (
    AdminProfile,
    AdminStatus,
    Permission,
    SignUpVia,
    StudentProfile,
)
from tests.factories.base import BaseFactory, generate_uuid, utc_now


class StudentProfileFactory(BaseFactory):
    __model__ = StudentProfile

    id = Use(generate_uuid)
    auth_user_id = None  # Required FK - must be set explicitly
    first_name = None
    last_name = None
    dob = None
    gender = None
    profile_picture = None
    push_id = None
    year = None
    nic = None
    nic_pic = None
    register_code = None
    delivery_details = None
    extra_details = None
    is_profile_completed = False
    created_at = Use(utc_now)
    updated_at = Use(utc_now)


class AdminProfileFactory(BaseFactory):
    __model__ = AdminProfile

    id = Use(generate_uuid)
    auth_user_id = None  # Required FK - must be set explicitly
    first_name = None
    last_name = None
    image = None
    admin_type = None
    sign_up_via = SignUpVia.WEB.value
    status = AdminStatus.PENDING.value
    is_profile_completed = False
    created_at = Use(utc_now)
    updated_at = Use(utc_now)


class PermissionFactory(BaseFactory):
    __model__ = Permission

    id = Use(generate_uuid)
    name = Use(lambda: f"perm_{generate_uuid().hex[-8:]}")
    description = None
    created_at = Use(utc_now)
