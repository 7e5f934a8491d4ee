import logging
import uuid
from typing import Dict, Iterable, List, Optional

from pricing.exceptions import CouponNotFoundError, CouponValidationError
from pricing.interface import Coupon, CouponValidation, utc_now

logger = logging.getLogger(__name__)

MIN_CODE_LENGTH = 4
MAX_CODE_LENGTH = 20
MAX_DISCOUNT_PERCENT = 50.0


def is_coupon_applicable(coupon: Optional[Coupon]) -> bool:
    """Só cupons ativos com desconto em (0, 50%] participam do preço"""
    return coupon is not None and coupon.active and 0 < coupon.discount_percent <= MAX_DISCOUNT_PERCENT


class CouponStore:
    """
    Cupons de desconto mantidos em memória.

    Códigos são comparados sem diferenciar maiúsculas e gravados em maiúsculas.
    """

    def __init__(self, coupons: Optional[Iterable[Coupon]] = None):
        self._coupons: Dict[str, Coupon] = {}
        for c in coupons or []:
            clean = self._check(c.code, c.discount_percent, ignore_id=c.id)
            self._coupons[c.id] = c.model_copy(update={"code": clean})

    def get_all(self) -> List[Coupon]:
        return list(self._coupons.values())

    def get_active(self) -> List[Coupon]:
        return [c for c in self._coupons.values() if c.active]

    def get(self, coupon_id: str) -> Coupon:
        coupon = self._coupons.get(coupon_id)
        if coupon is None:
            raise CouponNotFoundError("Cupom não encontrado")
        return coupon

    def validate(self, code: Optional[str]) -> CouponValidation:
        """Valida um código digitado pelo cliente (nunca levanta exceção)"""
        if not code or not code.strip():
            return CouponValidation(valid=False)

        code_lower = code.strip().lower()
        for c in self._coupons.values():
            if c.active and c.code.lower() == code_lower:
                return CouponValidation(valid=True, coupon=c)
        return CouponValidation(valid=False)

    def _check(self, code: str, discount_percent: float, ignore_id: Optional[str] = None) -> str:
        clean = (code or "").strip()
        code_lower = clean.lower()
        if any(c.id != ignore_id and c.code.lower() == code_lower for c in self._coupons.values()):
            raise CouponValidationError("Já existe um cupom com este código")
        if not MIN_CODE_LENGTH <= len(clean) <= MAX_CODE_LENGTH:
            raise CouponValidationError(
                f"O código deve ter entre {MIN_CODE_LENGTH} e {MAX_CODE_LENGTH} caracteres"
            )
        if not 0 < discount_percent <= MAX_DISCOUNT_PERCENT:
            raise CouponValidationError("O desconto deve ser maior que 0% e no máximo 50%")
        return clean.upper()

    def add(self, code: str, discount_percent: float) -> Coupon:
        """
        Cadastra um cupom ativo.

        Raises:
            CouponValidationError: Código repetido, tamanho inválido ou desconto fora de (0, 50]
        """
        clean = self._check(code, discount_percent)
        coupon = Coupon(id=uuid.uuid4().hex, code=clean, active=True, discount_percent=discount_percent)
        self._coupons[coupon.id] = coupon
        logger.info(f"Cupom criado: {coupon.code} ({discount_percent}%)")
        return coupon

    def update(self, coupon_id: str, code: str, discount_percent: float, active: bool) -> Coupon:
        current = self.get(coupon_id)
        clean = self._check(code, discount_percent, ignore_id=coupon_id)
        coupon = current.model_copy(update={
            "code": clean,
            "discount_percent": discount_percent,
            "active": active,
            "updated_at": utc_now(),
        })
        self._coupons[coupon_id] = coupon
        logger.info(f"Cupom atualizado: {coupon.code}")
        return coupon

    def toggle(self, coupon_id: str) -> Coupon:
        current = self.get(coupon_id)
        coupon = current.model_copy(update={"active": not current.active, "updated_at": utc_now()})
        self._coupons[coupon_id] = coupon
        logger.info(f"Cupom {coupon.code} {'ativado' if coupon.active else 'desativado'}")
        return coupon

    def delete(self, coupon_id: str) -> None:
        if self._coupons.pop(coupon_id, None) is None:
            raise CouponNotFoundError("Cupom não encontrado")
        logger.info(f"Cupom removido: {coupon_id}")
