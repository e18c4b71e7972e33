"""
Example serving a data grid from a DynamoDB table.

Each page is one Scan call; the LastEvaluatedKey travels to the browser as an
opaque continuation token and comes back on the next request.
Runs against LocalStack by default (LOCALSTACK_ENDPOINT=http://localhost:4566).
"""

import json
import os

import boto3

from gridpager import DynamoTableSource, ServerTable, TableRequest

client = boto3.client(
    "dynamodb",
    endpoint_url=os.getenv("LOCALSTACK_ENDPOINT", "http://localhost:4566"),
    region_name="eu-south-1",
    aws_access_key_id="test",
    aws_secret_access_key="test",
)

source = DynamoTableSource("Employees", client=client)

# 1. Server side: answer a request the browser posted as JSON
wire_request = {"draw": 1, "start": 0, "length": 5, "continuationToken": None}
response = source(TableRequest.model_validate(wire_request))
print(json.dumps(response.model_dump(by_alias=True), indent=2, default=str))

# 2. Client side: let ServerTable track tokens and page numbers
table = ServerTable(source)
table.first_page()
table.next_page()
table.previous_page()
print(f"page {table.current_page + 1}, about {table.total_records} employees")
