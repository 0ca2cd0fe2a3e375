# Generated migration for ledger and outbox

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="LedgerAccount",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("customer_ref", models.CharField(db_index=True, max_length=100, verbose_name="cliente")),
                ("store_ref", models.CharField(db_index=True, max_length=100, verbose_name="loja")),
                (
                    "balance",
                    models.IntegerField(
                        default=0,
                        help_text="Pontos disponíveis para resgate nesta loja",
                        verbose_name="saldo de pontos",
                    ),
                ),
                (
                    "lifetime_earned",
                    models.IntegerField(
                        default=0,
                        help_text="Total de pontos já ganhos em vendas (nunca decresce)",
                        verbose_name="pontos ganhos",
                    ),
                ),
                (
                    "lifetime_redeemed",
                    models.IntegerField(
                        default=0,
                        help_text="Total de pontos já usados em descontos",
                        verbose_name="pontos resgatados",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="criado em")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="atualizado em")),
            ],
            options={
                "verbose_name": "conta de pontos",
                "verbose_name_plural": "contas de pontos",
                "db_table": "tillman_ledger_account",
                "ordering": ["customer_ref", "store_ref"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("customer_ref", "store_ref"),
                        name="tillman_unique_account_per_store",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("balance__gte", 0)),
                        name="tillman_account_balance_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "reference",
                    models.CharField(
                        help_text="ID da venda ou referência do ajuste",
                        max_length=100,
                        unique=True,
                        verbose_name="referência",
                    ),
                ),
                (
                    "entry_type",
                    models.CharField(
                        choices=[
                            ("sale", "Venda"),
                            ("adjust", "Ajuste"),
                            ("mirror", "Espelho remoto"),
                        ],
                        default="sale",
                        max_length=20,
                        verbose_name="tipo",
                    ),
                ),
                ("points_earned", models.IntegerField(default=0, verbose_name="pontos ganhos")),
                ("points_used", models.IntegerField(default=0, verbose_name="pontos usados")),
                (
                    "delta",
                    models.IntegerField(
                        help_text="Positivo para acúmulo, negativo para resgate líquido",
                        verbose_name="variação",
                    ),
                ),
                ("balance_after", models.IntegerField(verbose_name="saldo após")),
                ("description", models.CharField(blank=True, max_length=200, verbose_name="descrição")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="criado em")),
                ("created_by", models.CharField(blank=True, max_length=100, verbose_name="criado por")),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="entries",
                        to="tillman.ledgeraccount",
                        verbose_name="conta",
                    ),
                ),
            ],
            options={
                "verbose_name": "lançamento de pontos",
                "verbose_name_plural": "lançamentos de pontos",
                "db_table": "tillman_ledger_entry",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["account", "-created_at"], name="tillman_entry_account_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OutboxEntry",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("sale_ref", models.CharField(max_length=100, unique=True, verbose_name="venda")),
                ("store_ref", models.CharField(db_index=True, max_length=100, verbose_name="loja")),
                ("customer_ref", models.CharField(db_index=True, max_length=100, verbose_name="cliente")),
                (
                    "payload",
                    models.JSONField(
                        help_text="Venda com totais congelados (Sale.as_dict())",
                        verbose_name="venda serializada",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("queued", "Pendente"), ("settled", "Sincronizada")],
                        db_index=True,
                        default="queued",
                        max_length=20,
                        verbose_name="status",
                    ),
                ),
                ("attempts", models.PositiveIntegerField(default=0, verbose_name="tentativas")),
                ("last_error", models.TextField(blank=True, verbose_name="último erro")),
                ("last_attempt_at", models.DateTimeField(blank=True, null=True, verbose_name="última tentativa")),
                ("enqueued_at", models.DateTimeField(auto_now_add=True, verbose_name="enfileirada em")),
                ("settled_at", models.DateTimeField(blank=True, null=True, verbose_name="sincronizada em")),
            ],
            options={
                "verbose_name": "venda pendente",
                "verbose_name_plural": "vendas pendentes",
                "db_table": "tillman_outbox_entry",
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["status", "id"], name="tillman_outbox_status_idx"),
                ],
            },
        ),
    ]
