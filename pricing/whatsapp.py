"""
Mensagem de checkout via WhatsApp.

Monta o texto enviado ao vendedor com os valores do preço resolvido.
"""
import re
from typing import List, Optional
from urllib.parse import quote

from pydantic import BaseModel

from pricing.interface import InstallmentOption, PriceMode, PriceResolution, ProductSummary

WHATSAPP_BASE_URL = "https://wa.me"


def sanitize_for_whatsapp(text: str) -> str:
    """Remove marcações do WhatsApp (* _ ~ `) e excesso de linhas em branco"""
    if not text:
        return ""
    text = re.sub(r"\n{3,}", "\n\n", text)
    text = re.sub(r"[*_~`]", "", text)
    return text.strip()


def _brl(value: Optional[float]) -> str:
    return f"R$ {(value or 0.0):.2f}"


def _price_lines(resolution: PriceResolution, cash_price: float,
                 options: List[InstallmentOption]) -> List[str]:
    details = resolution.details
    option = details.option

    if resolution.mode == PriceMode.CASH:
        lines = [
            "💰 *Pagamento à vista (5% desconto)*",
            f"• Valor final: {_brl(resolution.final_price)}",
        ]
        if details.pass_on_cash_discount:
            lines.append(f"• Preço de tabela: {_brl(details.display_price)}")
        return lines

    if resolution.mode == PriceMode.COUPON_INSTALLMENT and option:
        return [
            "🎟️ *Com cupom + Parcelado:*",
            f"• {option.installments}x de {_brl(option.installment_value)}",
            f"• Total: {_brl(option.total_amount)}",
            "• 💳 Visa/Mastercard",
            "• ✅ Cupom de desconto aplicado!",
        ]

    if resolution.mode == PriceMode.INSTALLMENT and option:
        return [
            f"• *Parcelado:* {option.installments}x de {_brl(option.installment_value)}",
            f"• Total: {_brl(option.total_amount)}",
            "• 💳 Visa/Mastercard",
        ]

    if resolution.mode == PriceMode.COUPON:
        return [
            f"• *Com cupom:* {_brl(resolution.final_price)}",
            f"• Valor original: {_brl(details.display_price)}",
        ]

    # Nenhuma forma selecionada: lista todas as opções
    lines = [
        "",
        "💵 *À Vista (5% desconto):*",
        f"• {_brl(cash_price)}",
        "",
        "💳 *Parcelado (Visa/Mastercard):*",
    ]
    for o in options:
        lines.append(f"• {o.installments}x de {_brl(o.installment_value)} (Total: {_brl(o.total_amount)})")
    lines.extend([
        "",
        "🎟️ *Possui cupom de desconto?*",
        "Insira no site para ver o preço especial!",
        "",
        f"📋 *Preço de tabela:* {_brl(details.display_price)}",
    ])
    return lines


def build_whatsapp_message(product: ProductSummary, resolution: PriceResolution,
                           cash_price: float, options: List[InstallmentOption]) -> str:
    """
    Gera o texto da mensagem de interesse no produto.

    Args:
        product: Dados do produto
        resolution: Preço resolvido (define o bloco de valores)
        cash_price: Valor à vista, usado quando nada foi selecionado
        options: Opções de parcelamento sobre a vitrine, idem

    Returns:
        Texto pronto para envio (sem URL-encoding)
    """
    lines = [
        "🛒 *INTERESSE EM PRODUTO*",
        "",
        f"📦 *Produto:* {sanitize_for_whatsapp(product.name)} - {sanitize_for_whatsapp(product.brand)}",
        "",
        "📋 *Especificações:*",
        sanitize_for_whatsapp(product.specs),
        "",
        "📝 *Descrição:*",
        sanitize_for_whatsapp(product.description),
        "",
        "💰 *Valores:*",
    ]
    lines.extend(_price_lines(resolution, cash_price, options))

    if product.image_url:
        lines.extend(["", f"🖼️ *Imagem:* {product.image_url}"])

    return "\n".join(lines)


def build_whatsapp_url(phone: str, message: str) -> str:
    digits = re.sub(r"\D", "", phone or "")
    return f"{WHATSAPP_BASE_URL}/{digits}?text={quote(message, safe='')}"


class WhatsAppQuote(BaseModel):
    message: str
    url: str
    resolution: PriceResolution
