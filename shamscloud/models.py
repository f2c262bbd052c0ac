from tortoise.models import Model
from tortoise import fields
from .records import Role, ShareType, TokenType

class User(Model):
    id = fields.IntField(primary_key=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    email = fields.CharField(max_length=255, unique=True)
    name = fields.CharField(max_length=255)
    password = fields.CharField(max_length=255)
    role = fields.CharEnumField(Role, max_length=16, default=Role.USER)

    quota = fields.BigIntField()
    used_space = fields.BigIntField(default=0)

    is_blocked = fields.BooleanField(default=False)
    is_email_verified = fields.BooleanField(default=False)

    class Meta:
        table = "users"

class File(Model):
    id = fields.IntField(primary_key=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    name = fields.TextField()
    path = fields.TextField(default="")
    type = fields.CharField(max_length=255)
    size = fields.BigIntField(default=0)
    is_folder = fields.BooleanField(default=False)
    parent_id = fields.IntField(null=True, db_index=True)
    user: fields.ForeignKeyRelation[User] = fields.ForeignKeyField("models.User", related_name="files", on_delete=fields.CASCADE)

    is_public = fields.BooleanField(default=False)
    public_token = fields.CharField(max_length=64, null=True, unique=True)
    share_type = fields.CharEnumField(ShareType, max_length=16, null=True)
    is_password_protected = fields.BooleanField(default=False)
    share_password = fields.CharField(max_length=255, null=True)

    class Meta:
        table = "files"

class VerificationToken(Model):
    id = fields.IntField(primary_key=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    token = fields.CharField(max_length=128, unique=True)
    user: fields.ForeignKeyRelation[User] = fields.ForeignKeyField("models.User", related_name="tokens", on_delete=fields.CASCADE)
    type = fields.CharEnumField(TokenType, max_length=32)
    expires_at = fields.DatetimeField()

    class Meta:
        table = "verification_tokens"
