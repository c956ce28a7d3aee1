from django.contrib import admin
from .models import AuditLog

@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("created_at","level","category","action","actor_email","target_entity","target_id","resolved")
    list_filter = ("level","category","target_entity","resolved")
    search_fields = ("actor_email","action","target_id","endpoint")
    readonly_fields = [f.name for f in AuditLog._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
