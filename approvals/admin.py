from django.contrib import admin
from .models import ProviderApproval, ApprovalDocument

class ApprovalDocumentInline(admin.TabularInline):
    model = ApprovalDocument
    extra = 0
    readonly_fields = ("verified", "verified_by", "verification_date")

@admin.register(ProviderApproval)
class ProviderApprovalAdmin(admin.ModelAdmin):
    list_display = ("provider","status","priority","assigned_to","verification_score","submission_date")
    list_filter = ("status","priority")
    search_fields = ("provider__user__email","provider__display_name")
    readonly_fields = ("verification_score","internal_notes","communication_log")
    inlines = [ApprovalDocumentInline]

    def has_delete_permission(self, request, obj=None):
        return False
