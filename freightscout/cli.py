#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
FreightScout Command Line Interface
===================================

A simple CLI for the Braspress quotation client that allows users to:
1. Quote a shipment by road, air or both
2. Describe volumes inline (PESO:CxLxA) and shipment data by flags or a JSON file
3. Print the result as a table or raw JSON

Credentials come from --username/--password or BRASPRESS_USERNAME/BRASPRESS_PASSWORD.
"""

import argparse
import json
import logging
import logging.config
import sys

from tabulate import tabulate

from freightscout import settings
from freightscout.carriers.braspress import BraspressClient, BraspressError, BraspressValidationError

logger = logging.getLogger("freightscout.cli")

# Flag -> Braspress shipment field
SHIPMENT_FLAGS = {
    "cnpj_remetente": "cnpjRemetente",
    "cnpj_destinatario": "cnpjDestinatario",
    "tipo_frete": "tipoFrete",
    "cep_origem": "cepOrigem",
    "cep_destino": "cepDestino",
    "valor_mercadoria": "vlrMercadoria",
}


def parse_volume(value):
    """Parse PESO:CxLxA, e.g. 5.5:0.67x0.67x0.46."""
    try:
        weight, dims = value.split(":", 1)
        comprimento, largura, altura = dims.lower().split("x")
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid volume '{value}', expected PESO:CxLxA (e.g. 5.5:0.67x0.67x0.46)"
        )
    return weight, {"comprimento": comprimento, "largura": largura, "altura": altura}


def parse_arguments(argv=None):
    """Parse command-line arguments for the FreightScout CLI."""
    parser = argparse.ArgumentParser(description="FreightScout CLI - Braspress freight quotations")

    parser.add_argument(
        "--volume",
        action="append",
        type=parse_volume,
        default=[],
        metavar="PESO:CxLxA",
        help="Volume weight (kg) and dimensions (m); repeat for each package",
    )

    # Shipment data
    parser.add_argument("--shipment-file", help="JSON file with shipment fields")
    parser.add_argument("--cnpj-remetente", help="Sender CNPJ")
    parser.add_argument("--cnpj-destinatario", help="Recipient CNPJ")
    parser.add_argument("--tipo-frete", help="Freight payment code (1=CIF, 2=FOB)")
    parser.add_argument("--cep-origem", help="Origin postal code")
    parser.add_argument("--cep-destino", help="Destination postal code")
    parser.add_argument("--valor-mercadoria", type=float, help="Declared cargo value")

    # Quotation options
    parser.add_argument(
        "--modal",
        action="append",
        choices=["R", "A"],
        help="Modality: R (road) or A (air); repeat for both (default: R)",
    )
    parser.add_argument("--format", choices=["json", "xml"], default="json", help="API response format")

    # Credentials and environment
    parser.add_argument("--username", help="Braspress API user")
    parser.add_argument("--password", help="Braspress API password")
    parser.add_argument(
        "--homologacao", action="store_true", help="Use the homologation (staging) host"
    )

    # Output
    parser.add_argument("--json", action="store_true", help="Output raw results as JSON")
    parser.add_argument(
        "--log-format", choices=["verbose", "json"], default="verbose", help="Log line format"
    )

    return parser.parse_args(argv)


def build_shipment_data(args):
    """Merge the shipment file (if any) with individual flags; flags win."""
    shipment = {}
    if args.shipment_file:
        try:
            with open(args.shipment_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise BraspressValidationError(f"Cannot read shipment file: {e}") from e
        except json.JSONDecodeError as e:
            raise BraspressValidationError(f"Invalid shipment file {args.shipment_file}: {e}") from e
        if not isinstance(data, dict):
            raise BraspressValidationError(
                f"Invalid shipment file {args.shipment_file}: expected a JSON object"
            )
        shipment.update(data)

    for flag, field in SHIPMENT_FLAGS.items():
        value = getattr(args, flag)
        if value is not None:
            shipment[field] = value
    return shipment


def format_output(client, results, json_output=False):
    """Format the quotation results as JSON or a table."""
    if json_output:
        return json.dumps(results, indent=2, ensure_ascii=False, default=str)

    table_data = []
    for label, raw in results.items():
        row = client.standardize_response(label, raw)
        table_data.append([
            row["modality"],
            row["quote_id"] if row["quote_id"] is not None else "-",
            f"{row['lead_time_days']:g} days" if row["lead_time_days"] is not None else "Unknown",
            f"R$ {row['total_freight']:.2f}" if row["total_freight"] is not None else "Unknown",
        ])

    headers = ["Modality", "Quote ID", "Lead time", "Total freight"]
    output = tabulate(table_data, headers=headers, tablefmt="grid")
    output += f"\n\nVolumes: {client.volume_count}  Total weight: {client.total_weight:g} kg"
    return output


def main(argv=None):
    """Main entry point for the CLI."""
    args = parse_arguments(argv)
    logging.config.dictConfig(settings.get_logging_config(args.log_format))

    try:
        client = BraspressClient(
            username=args.username,
            password=args.password,
            production=False if args.homologacao else None,
        )
        for weight, dimensions in args.volume:
            client.add_volume(weight, dimensions)

        shipment = build_shipment_data(args)
        results = client.request_quotation(shipment, args.format, args.modal or ["R"])
    except BraspressValidationError as e:
        logger.error(e.message)
        print(f"Error: {e.message}", file=sys.stderr)
        return 2
    except BraspressError as e:
        logger.error(str(e))
        print(str(e), file=sys.stderr)
        return 1

    print(format_output(client, results, json_output=args.json))
    return 0


if __name__ == "__main__":
    sys.exit(main())
