from django.contrib import admin
from .models import Dispute, DisputeMessage


class DisputeMessageInline(admin.TabularInline):
    model = DisputeMessage
    extra = 0


@admin.register(Dispute)
class DisputeAdmin(admin.ModelAdmin):
    list_display = ('id', 'contract', 'initiator', 'defendant', 'status', 'assigned_admin', 'created_at')
    list_filter = ('status',)
    # Status moves only through the claim/resolve endpoints so the contract stays in sync.
    readonly_fields = ('status', 'assigned_admin', 'decided_by', 'decided_at')
    inlines = [DisputeMessageInline]
