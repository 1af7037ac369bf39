"""
Anchor Label Sets.

Every label the extractors anchor on is plain text data. The defaults
below cover French and English invoices; any set can be replaced from
settings.yaml under ``extraction.labels.<name>`` without touching the
extraction code.

compile_labels() turns a list of plain labels into one regex fragment:
    - whitespace between words is flexible ("Total  HT", "TotalHT")
    - dots are optional ("H.T." matches "HT")
    - hyphens may be a space or nothing ("Sous-total", "Sous total")
    - straight and curly apostrophes are interchangeable
    - word boundaries are enforced on alphanumeric label edges

Author: ML Engineering Team
"""

import re
from typing import Dict, Iterable, List

from config import get_config


DEFAULT_LABELS: Dict[str, List[str]] = {
    # Party blocks
    'vendor': [
        'Vendeur', 'Fournisseur', 'Émetteur', 'Vendor', 'Seller', 'Supplier',
    ],
    'client': [
        'Client', 'Acheteur', 'Destinataire', 'Buyer', 'Recipient',
        'Customer', 'Bill to',
    ],
    'client_stop': [
        'Date', 'N°', 'Numéro', 'Référence', 'Facture', 'Invoice',
        'Reference', 'Order', 'Conditions', 'Payment terms',
    ],

    # Line item table
    'table': [
        'Description', 'Désignation', 'Designation', 'Libellé', 'Prestation',
    ],
    'table_stop': [
        'Total HT', 'Total H.T.', 'Montant HT', 'Sous-total', 'Subtotal',
        'Sub-total', 'Total before tax', 'Total excl. tax',
    ],
    'table_header': [
        'Description', 'Désignation', 'Designation', 'Libellé', 'Qté', 'Qte',
        'Quantité', 'Quantite', 'Quantity', 'Qty', 'Prix', 'Price',
        'Unit price', 'PU', 'TVA', 'VAT', 'Total', 'Montant', 'Amount',
        'Unité', 'Unit',
    ],

    # Free-text notes
    'notes': [
        'Informations additionnelles', 'Information additionnelle',
        'Informations complémentaires', 'Additional information', 'Notes',
    ],
    'notes_stop': [
        'Description', 'Désignation', 'Mention', 'Mentions', 'Signature',
    ],

    # Invoice metadata
    'invoice_number': [
        'Facture N°', 'Facture No', 'N° Facture', 'N° de facture',
        'Numéro de facture', 'Invoice N°', 'Invoice No', 'Invoice Number',
        'Invoice #', 'Facture', 'Invoice',
    ],
    'invoicing_date': [
        'Date de facturation', 'Date de facture', "Date d'émission",
        "Date d'emission", 'Date facture', 'Date of issue', 'Issue date',
        'Invoice date', 'Date of invoice',
    ],
    'due_date': [
        "Date d'échéance", "Date d'echeance", 'Échéance', 'Echeance',
        'Date de paiement', 'Date de règlement', 'Due date', 'Payment due',
        'Due on', 'Pay by',
    ],
    'payment_terms': [
        'Conditions de paiement', 'Condition de paiement',
        'Délai de paiement', 'Payment terms', 'Terms of payment',
        'Payment conditions',
    ],
    'order_reference': [
        'Référence commande', 'Réf. commande', 'Bon de commande', 'Commande',
        'Référence', 'BC', 'Order reference', 'Order ref', 'Order No',
        'Purchase order', 'PO',
    ],

    # Headline totals
    'total_ht': [
        'Total HT', 'Total H.T.', 'Montant HT', 'Sous-total', 'Subtotal',
        'Sub-total', 'Total before tax', 'Total excl. tax',
        'Total excluding tax', 'Net amount',
    ],
    'total_tva': [
        'Total TVA', 'Montant TVA', 'TVA', 'Total VAT', 'VAT', 'Total tax',
        'Tax amount',
    ],
    'total_ttc': [
        'Total TTC', 'Montant TTC', 'TTC', 'Net à payer', 'Net a payer',
        'Montant total', 'Amount due', 'Net payable', 'Total including tax',
        'Total incl. tax', 'Total due', 'Grand total',
    ],

    # Party details
    'tax_id': [
        'SIRET', 'SIREN', 'Tax ID', 'Company registration', 'Registration No',
    ],
    'street_type': [
        'rue', 'avenue', 'av', 'bd', 'boulevard', 'chemin', 'allée', 'allee',
        'impasse', 'place', 'quai', 'route', 'street', 'st', 'road', 'rd',
        'lane', 'drive',
    ],
}

# Canonical unit name -> tokens seen on invoices
DEFAULT_UNITS: Dict[str, List[str]] = {
    'hour': ['h', 'hr', 'hrs', 'heure', 'heures', 'hour', 'hours'],
    'm2': ['m²', 'm2'],
    'kg': ['kg'],
    'unit': ['u', 'unité', 'unités', 'unite', 'unites', 'unit', 'units'],
    'piece': ['pièce', 'pièces', 'piece', 'pieces', 'pcs', 'pc'],
    'flat-rate': ['forfait', 'forfaits', 'flat-rate', 'flat rate', 'lump sum'],
    'day': ['jour', 'jours', 'day', 'days'],
    'month': ['mois', 'month', 'months'],
}

CURRENCY_SYMBOLS = ['€', 'EUR', '$', 'USD', '£', 'GBP']


def get_labels(name: str) -> List[str]:
    """
    Get a label set, preferring the configured one.

    Args:
        name: Label set name (e.g. "vendor", "total_ttc").

    Returns:
        List of plain-text labels.

    Raises:
        KeyError: If the set is neither configured nor a known default.
    """
    configured = get_config(f"extraction.labels.{name}")
    if configured:
        return list(configured)
    return list(DEFAULT_LABELS[name])


def get_units() -> Dict[str, List[str]]:
    """Get the unit vocabulary (canonical name -> tokens)."""
    configured = get_config("extraction.units")
    if configured:
        return {unit: list(tokens) for unit, tokens in configured.items()}
    return {unit: list(tokens) for unit, tokens in DEFAULT_UNITS.items()}


def _label_to_regex(label: str) -> str:
    """Convert one plain-text label to a tolerant regex fragment."""
    parts = []
    for char in label.strip():
        if char.isspace():
            if not parts or parts[-1] != r'\s*':
                parts.append(r'\s*')
        elif char == '.':
            parts.append(r'\.?')
        elif char == '-':
            parts.append(r'[-\s]?')
        elif char in "'’":
            parts.append(r"['’]?\s*")
        else:
            parts.append(re.escape(char))

    body = ''.join(parts)
    if label[:1].isalnum():
        body = r'(?<!\w)' + body
    if label.rstrip('.')[-1:].isalnum():
        body += r'(?!\w)'
    return body


def compile_labels(labels: Iterable[str]) -> str:
    """
    Build one alternation regex fragment from plain-text labels.

    Longer labels are tried first so that "Total HT" wins over "Total"
    at the same position.

    Args:
        labels: Plain-text labels.

    Returns:
        A non-capturing group, e.g. ``(?:(?<!\\w)Total\\s*HT(?!\\w)|...)``.

    Example:
        >>> pattern = compile_labels(["Total HT", "Sous-total"])
        >>> bool(re.search(pattern, "SOUS TOTAL", re.IGNORECASE))
        True
    """
    ordered = sorted({label for label in labels if label.strip()}, key=len, reverse=True)
    return '(?:' + '|'.join(_label_to_regex(label) for label in ordered) + ')'
