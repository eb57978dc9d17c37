"""Static bank catalog: display names and informational mortgage URLs."""

from types import MappingProxyType

from .models import BankId

BANK_NAMES = MappingProxyType({
    BankId.BANCOLOMBIA: "Bancolombia",
    BankId.BBVA: "BBVA Colombia",
    BankId.SCOTIABANK_COLPATRIA: "Scotiabank Colpatria",
    BankId.BANCO_CAJA_SOCIAL: "Banco Caja Social",
    BankId.AVVILLAS: "Banco AV Villas",
    BankId.ITAU: "Banco Itaú Colombia",
    BankId.FNA: "Fondo Nacional del Ahorro",
    BankId.BANCO_POPULAR: "Banco Popular",
    BankId.BANCO_DE_BOGOTA: "Banco de Bogotá",
    BankId.BANCO_DE_OCCIDENTE: "Banco de Occidente",
    BankId.DAVIVIENDA: "Davivienda",
    BankId.BANCO_AGRARIO: "Banco Agrario",
    BankId.BANCOOMEVA: "Bancoomeva",
})

BANK_URLS = MappingProxyType({
    BankId.BANCOLOMBIA: "https://www.bancolombia.com/personas/creditos/vivienda/credito-hipotecario-para-comprar-vivienda",
    BankId.BBVA: "https://www.bbva.com.co/personas/productos/prestamos/vivienda/hipotecario.html",
    BankId.SCOTIABANK_COLPATRIA: "https://www.davibank.com/personas/hipotecario",
    BankId.BANCO_CAJA_SOCIAL: "https://www.bancocajasocial.com/creditos-de-vivienda/credito-hipotecario/",
    BankId.AVVILLAS: "https://www.avvillas.com.co/credito-hipotecario",
    BankId.ITAU: "https://banco.itau.co/web/personas/prestamos/creditos-de-vivienda",
    BankId.FNA: "https://www.fna.gov.co/vivienda",
    BankId.BANCO_POPULAR: "https://www.bancopopular.com.co/wps/portal/bancopopular/inicio/para-ti/financiacion-vivienda",
    BankId.BANCO_DE_BOGOTA: "https://www.bancodebogota.com/personas/creditos/vivienda",
    BankId.BANCO_DE_OCCIDENTE: "https://www.bancodeoccidente.com.co/wps/portal/banco-de-occidente/bancodeoccidente/para-personas/creditos/vivienda",
    BankId.DAVIVIENDA: "https://www.davivienda.com/personas/credito-de-vivienda-inmuebles/credito-hipotecario",
    BankId.BANCO_AGRARIO: "https://www.bancoagrario.gov.co/personas/asalariado-independiente-pensionado/credito-hipotecario",
    BankId.BANCOOMEVA: "https://vivienda.coomeva.com.co/",
})


def bank_name(bank_id: BankId) -> str:
    """Display name for a bank id."""
    return BANK_NAMES[BankId(bank_id)]
