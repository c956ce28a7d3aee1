from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User

@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("email","role","is_active","is_staff","email_verified","last_login")
    list_filter = ("role","is_active","is_staff")
    search_fields = ("email","first_name","last_name")
    ordering = ("-date_joined",)
    fieldsets = (
        (None, {"fields": ("email","password")}),
        ("Personal info", {"fields": ("first_name","last_name")}),
        ("Access", {"fields": ("role","admin_permissions","email_verified","is_active","is_staff","is_superuser")}),
        ("Important dates", {"fields": ("last_login","date_joined")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email","role","password1","password2")}),
    )
