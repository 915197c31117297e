"""
Core App - Shared settings and the system audit trail
"""
from django.conf import settings
from django.db import models


class SystemSetting(models.Model):
    """Key/value configuration editable from the admin"""
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    description = models.CharField(max_length=255, blank=True)

    class Meta:
        verbose_name = "Configuração"
        verbose_name_plural = "Configurações"
        ordering = ['key']

    def __str__(self):
        return f"{self.key} = {self.value}"

    @classmethod
    def get_value(cls, key, default=None):
        obj = cls.objects.filter(key=key).first()
        return obj.value if obj else default

    @classmethod
    def set_value(cls, key, value, description=''):
        obj, _ = cls.objects.update_or_create(
            key=key,
            defaults={'value': value, 'description': description}
        )
        return obj


class SystemLog(models.Model):
    """
    Audit trail row written once per successful mutating operation.
    Records who did what to which item, plus a free-text detail.
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='system_logs'
    )
    action = models.CharField(max_length=100, db_index=True)  # e.g. 'Aprovação de pedido'
    item_type = models.CharField(max_length=50, db_index=True)  # 'order', 'purchase_order'
    item_id = models.CharField(max_length=100, blank=True)
    details = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name = "Log do Sistema"
        verbose_name_plural = "Logs do Sistema"
        indexes = [
            models.Index(fields=['item_type', 'item_id'], name='core_syslog_item_idx'),
        ]

    def __str__(self):
        return f"{self.action} on {self.item_type} ({self.item_id}) at {self.created_at}"

    @classmethod
    def record(cls, user, action, item_type, item_id, details=''):
        if user is not None and not getattr(user, 'pk', None):
            user = None
        return cls.objects.create(
            user=user,
            action=action,
            item_type=item_type,
            item_id=str(item_id),
            details=details,
        )
