from decimal import Decimal

import pytest

from hub360.calc.import_formal import FormalConfig, FormalProduct, calculate_formal
from hub360.calc.import_simplified import SimplifiedConfig, SimplifiedProduct, calculate_simplified
from hub360.calc.money import CalculoInvalido


def simp(**kw) -> SimplifiedProduct:
    return SimplifiedProduct.from_mapping({"nome": "Fone", "quantidade": 10, "valor_unitario_usd": 10, **kw})


def test_simplified_single_product():
    cfg = SimplifiedConfig.from_mapping({"taxa_cambio": 5, "frete_total": 20})
    res = calculate_simplified(cfg, [simp(peso_unitario_kg="0.1")])

    linha = res.produtos[0]
    assert linha["custo_produto_brl"] == "500.00"
    assert linha["frete_brl"] == "100.00"
    assert linha["ii"] == "360.00"
    assert linha["icms"] == "196.63"
    assert linha["custo_total"] == "1156.63"
    assert linha["custo_unitario"] == "115.66"

    assert res.totais["multiplicador_importacao"] == "2.3133"
    assert res.totais["frete_usd"] == "20.00"
    assert res.totais["preco_por_kg_usd"] == "20.00"


def test_simplified_freight_split_by_weight():
    cfg = SimplifiedConfig.from_mapping({"taxa_cambio": 5, "frete_total": 20})
    res = calculate_simplified(cfg, [
        simp(nome="A", quantidade=1, peso_unitario_kg=1),
        simp(nome="B", quantidade=1, peso_unitario_kg=3),
    ])
    assert [p["frete_brl"] for p in res.produtos] == ["25.00", "75.00"]
    assert res.totais["frete_brl"] == "100.00"


def test_simplified_freight_in_brl():
    cfg = SimplifiedConfig.from_mapping({"taxa_cambio": 5, "frete_total": 100, "moeda_frete": "BRL"})
    res = calculate_simplified(cfg, [simp()])
    assert res.produtos[0]["frete_brl"] == "100.00"
    assert res.totais["frete_usd"] == "20.00"


def test_simplified_other_expenses_by_quantity():
    cfg = SimplifiedConfig.from_mapping({"taxa_cambio": 5, "outras_despesas_brl": 90})
    res = calculate_simplified(cfg, [simp(nome="A", quantidade=1), simp(nome="B", quantidade=2)])
    assert [p["despesas_brl"] for p in res.produtos] == ["30.00", "60.00"]


def test_simplified_validation():
    with pytest.raises(CalculoInvalido):
        calculate_simplified(SimplifiedConfig.from_mapping({"taxa_cambio": 0}), [simp()])
    with pytest.raises(CalculoInvalido):
        calculate_simplified(SimplifiedConfig.from_mapping({"aliquota_icms_pct": 100}), [simp()])
    with pytest.raises(CalculoInvalido) as exc:
        calculate_simplified(SimplifiedConfig(), [])
    assert exc.value.field == "produtos"


def _formal_cfg(**kw) -> FormalConfig:
    data = {
        "taxa_dolar": 5,
        "frete_usd": 100,
        "seguro_pct": 1,
        "impostos": [
            {"tipo": "ii", "aliquota_pct": 10},
            {"tipo": "ipi", "aliquota_pct": 5},
            {"tipo": "pis", "aliquota_pct": "2.1"},
            {"tipo": "cofins", "aliquota_pct": "9.65"},
            {"tipo": "icms", "aliquota_pct": 18},
        ],
    }
    data.update(kw)
    return FormalConfig.from_mapping(data)


def test_formal_tax_cascade():
    prod = FormalProduct.from_mapping({
        "nome": "Luminária", "quantidade": 100, "valor_unitario_usd": 10,
        "comprimento_cm": 50, "largura_cm": 40, "altura_cm": 30,
    })
    res = calculate_formal(_formal_cfg(), [prod])
    linha = res.produtos[0]

    assert linha["fob_brl"] == "5000.00"
    assert linha["frete_brl"] == "500.00"
    assert linha["seguro_brl"] == "50.00"
    assert linha["valor_aduaneiro"] == "5550.00"
    assert linha["ii"] == "555.00"
    assert linha["ipi"] == "305.25"
    assert linha["pis"] == "116.55"
    assert linha["cofins"] == "535.58"
    assert linha["icms"] == "1550.28"
    assert linha["custo_total"] == "8612.66"
    assert linha["cbm_unitario"] == "0.060000"

    assert res.totais["impostos_total"] == "3062.66"
    assert res.totais["multiplicador"] == "1.7225"


def test_formal_freight_split_by_cbm():
    a = FormalProduct.from_mapping({"nome": "A", "quantidade": 1, "valor_unitario_usd": 10,
                                    "comprimento_cm": 50, "largura_cm": 40, "altura_cm": 30})
    b = FormalProduct.from_mapping({"nome": "B", "quantidade": 1, "valor_unitario_usd": 10,
                                    "comprimento_cm": 20, "largura_cm": 10, "altura_cm": 100})
    res = calculate_formal(_formal_cfg(seguro_pct=0), [a, b])
    assert [p["frete_brl"] for p in res.produtos] == ["375.00", "125.00"]


def test_formal_product_rate_overrides_config():
    prod = FormalProduct.from_mapping({"nome": "X", "quantidade": 1, "valor_unitario_usd": 100, "aliquota_ii_pct": 0})
    res = calculate_formal(_formal_cfg(frete_usd=0, seguro_pct=0), [prod])
    assert res.produtos[0]["ii"] == "0.00"


def test_formal_expenses_in_usd_are_converted():
    prod = FormalProduct.from_mapping({"nome": "X", "quantidade": 1, "valor_unitario_usd": 100})
    cfg = _formal_cfg(
        frete_usd=0, seguro_pct=0, metodo_rateio="quantidade",
        despesas=[{"descricao": "Despachante", "valor": 40, "moeda": "USD"}, {"descricao": "Armazém", "valor": 50}],
    )
    res = calculate_formal(cfg, [prod])
    assert res.produtos[0]["despesas_brl"] == "250.00"


def test_formal_invalid_tax_type():
    prod = FormalProduct.from_mapping({"nome": "X", "quantidade": 1, "valor_unitario_usd": 1})
    with pytest.raises(CalculoInvalido):
        calculate_formal(_formal_cfg(impostos=[{"tipo": "iss", "aliquota_pct": 5}]), [prod])


def test_formal_aliquota_sums_same_type():
    cfg = _formal_cfg(impostos=[{"tipo": "outro", "aliquota_pct": 1}, {"tipo": "outro", "aliquota_pct": "0.5"}])
    assert cfg.aliquota("outro") == Decimal("1.5")
