from django.contrib import admin
from .models import ProviderProfile, ProviderDocument

@admin.register(ProviderProfile)
class ProviderProfileAdmin(admin.ModelAdmin):
    list_display = ("user","provider_type","specialization","license_number","verification_status","is_approved","is_active","created_at")
    list_filter = ("provider_type","verification_status","is_approved","is_active")
    search_fields = ("user__first_name","user__last_name","user__email","license_number","display_name")

@admin.register(ProviderDocument)
class ProviderDocumentAdmin(admin.ModelAdmin):
    list_display = ("profile","kind","file","file_url","uploaded_at")
