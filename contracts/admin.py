from django.contrib import admin
from .models import Contract, Milestone, MilestoneEvent


class MilestoneInline(admin.TabularInline):
    model = Milestone
    extra = 0
    readonly_fields = ('status', 'funded_at', 'submitted_at', 'approved_at', 'paid_at', 'refunded_at')


@admin.register(Contract)
class ContractAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'client', 'freelancer', 'status', 'progress', 'total_amount')
    list_filter = ('status',)
    readonly_fields = ('status', 'progress')
    inlines = [MilestoneInline]


admin.site.register(MilestoneEvent)
