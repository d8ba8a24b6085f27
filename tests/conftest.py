"""Shared pytest fixtures for the NHTSA gateway test suite.

Provides:
- make_row: build a raw vPIC DecodeVin result row
- decode_response: a realistic DecodeVin response (2006 Dodge Charger)
- recall_response: a realistic recallsByVehicle response
"""

import pytest


def make_row(var_id, name, value, value_id=None):
    """Raw vPIC result row as it appears in the JSON response."""
    return {
        "Variable": name,
        "VariableId": var_id,
        "Value": value,
        "ValueId": value_id,
    }


@pytest.fixture
def decode_rows():
    return [
        make_row(143, "Error Code", "0", "0"),
        make_row(191, "Error Text", "0 - VIN decoded clean. Check Digit (9th position) is correct", ""),
        make_row(26, "Make", "DODGE", "476"),
        make_row(28, "Model", "Charger", "1865"),
        make_row(29, "Model Year", "2006", ""),
        make_row(38, "Trim", "SXT", ""),
        make_row(15, "Drive Type", "RWD/Rear-Wheel Drive", "4"),
        make_row(5, "Body Class", "Sedan/Saloon", "13"),
        make_row(13, "Displacement (L)", "3.5", ""),
        make_row(11, "Displacement (CC)", "3500.0", ""),
        make_row(9, "Engine Number of Cylinders", "6", ""),
        make_row(18, "Engine Model", "EGG", ""),
        make_row(62, "Valve Train Design", "Single Overhead Cam (SOHC)", "4"),
        make_row(24, "Fuel Type - Primary", "Gasoline", "4"),
        make_row(67, "Fuel Delivery / Fuel Injection Type", "Multipoint Fuel Injection (MPFI)", "3"),
        make_row(135, "Turbo", "Not Applicable", None),
        make_row(71, "Engine Brake (hp) From", "250", ""),
        make_row(39, "Vehicle Type", "PASSENGER CAR", "2"),
        make_row(34, "Series", "", None),
        make_row(196, "Windows", None, None),
    ]


@pytest.fixture
def decode_response(decode_rows):
    return {
        "Count": len(decode_rows),
        "Message": "Results returned successfully",
        "SearchCriteria": "VIN:2B3KA43R86H389824",
        "Results": decode_rows,
    }


@pytest.fixture
def recall_entries():
    return [
        {
            "Manufacturer": "Ford Motor Company",
            "NHTSACampaignNumber": "15V340000",
            "ReportReceivedDate": "02/06/2015",
            "Component": "ENGINE:FUEL SYSTEM",
            "Summary": "Ford is recalling certain 2015 Mustang vehicles.",
            "Consequence": "Increased risk of fire.",
            "Remedy": "Dealers will replace the fuel line, free of charge.",
            "ModelYear": "2015",
            "Make": "FORD",
            "Model": "MUSTANG",
        },
        {
            "Manufacturer": "Ford Motor Company",
            "NHTSACampaignNumber": "16V005000",
            "ReportReceivedDate": "/Date(1452546000000-0500)/",
            "Component": "AIR BAGS",
            "Summary": "Ford is recalling certain 2015 Mustang vehicles with air bag inflators.",
            "Remedy": "Dealers will replace the inflator.",
        },
    ]


@pytest.fixture
def recall_response(recall_entries):
    return {
        "Count": len(recall_entries),
        "Message": "Results returned successfully",
        "results": recall_entries,
    }
