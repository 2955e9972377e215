from django.contrib import admin
from .models import (
    GramPanchayat, WaterTariff, House,
    MeterReading, WaterBill, Payment
)
from .services import delete_bill

# ── Customize admin site headers ─────────────────────────────
admin.site.site_header  = 'Gram Panchayat Water Billing'
admin.site.site_title   = 'Water Billing Admin'
admin.site.index_title  = 'Administration Dashboard'


@admin.register(GramPanchayat)
class GramPanchayatAdmin(admin.ModelAdmin):
    list_display    = ['name', 'district', 'state', 'upi_id', 'bill_counter', 'is_active']
    list_filter     = ['is_active', 'district']
    search_fields   = ['name', 'district']
    readonly_fields = ['bill_counter', 'created_at']


@admin.register(WaterTariff)
class WaterTariffAdmin(admin.ModelAdmin):
    list_display  = ['gram_panchayat', 'domestic_up_to_7', 'domestic_above_20',
                     'institutional_rate', 'commercial_rate', 'industrial_rate',
                     'effective_date', 'is_active']
    list_filter   = ['gram_panchayat', 'is_active']
    ordering      = ['-effective_date']
    fieldsets = (
        ('Schedule',     {'fields': ('gram_panchayat', 'effective_date', 'is_active',
                                     'approved_by', 'resolution')}),
        ('Domestic',     {'fields': ('domestic_up_to_7', 'domestic_7_to_10', 'domestic_10_to_15',
                                     'domestic_15_to_20', 'domestic_above_20')}),
        ('Non-domestic', {'fields': ('institutional_rate', 'commercial_rate', 'industrial_rate')}),
    )

    # Tariffs are superseded, never removed
    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(House)
class HouseAdmin(admin.ModelAdmin):
    list_display  = ['water_meter_number', 'owner_name', 'village', 'gram_panchayat',
                     'usage_type', 'previous_meter_reading', 'is_active']
    list_filter   = ['gram_panchayat', 'usage_type', 'is_active']
    search_fields = ['water_meter_number', 'owner_name', 'mobile_number', 'property_number']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(MeterReading)
class MeterReadingAdmin(admin.ModelAdmin):
    list_display  = ['house', 'month', 'year', 'current_reading', 'reading_date', 'reader_name']
    list_filter   = ['year', 'month']
    search_fields = ['house__water_meter_number', 'house__owner_name']


@admin.register(WaterBill)
class WaterBillAdmin(admin.ModelAdmin):
    list_display  = ['bill_number', 'house', 'month', 'year', 'total_usage',
                     'current_demand', 'arrears', 'total_amount',
                     'paid_amount', 'remaining_amount', 'status']
    list_filter   = ['gram_panchayat', 'status', 'year', 'month']
    search_fields = ['bill_number', 'house__water_meter_number', 'house__owner_name']
    readonly_fields = [f.name for f in WaterBill._meta.fields]

    def has_add_permission(self, request):
        return False

    def delete_model(self, request, obj):
        delete_bill(obj.gram_panchayat, obj.pk)

    def delete_queryset(self, request, queryset):
        for bill in queryset:
            delete_bill(bill.gram_panchayat, bill.pk)


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display  = ['bill_number', 'amount', 'payment_mode', 'transaction_id',
                     'collected_by', 'payment_date']
    list_filter   = ['payment_mode']
    search_fields = ['bill_number', 'transaction_id', 'collected_by']

    # Append-only audit trail
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
