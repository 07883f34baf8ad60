# scip-finder - SCIP symbol search with MCP server
# Copyright (C) 2026 The scip-finder Authors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""Protobuf message classes for binary SCIP indexes.

Declares the part of the ``scip.proto`` schema (github.com/sourcegraph/scip)
that symbol search reads: ``Index``, ``Metadata``, ``ToolInfo``, ``Document``
and ``Occurrence``. Field numbers match the published schema, so the fields
left out here (symbol information, diagnostics, external symbols) are kept
as unknown fields by the protobuf parser and otherwise ignored.

Usage::

    index = scip_pb2.Index()
    index.ParseFromString(data)
"""

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

_Field = descriptor_pb2.FieldDescriptorProto

_STRING = _Field.TYPE_STRING
_INT32 = _Field.TYPE_INT32
_MESSAGE = _Field.TYPE_MESSAGE
_OPTIONAL = _Field.LABEL_OPTIONAL
_REPEATED = _Field.LABEL_REPEATED


def _add_field(message, name, number, field_type, label=_OPTIONAL, type_name=None):
    field = message.field.add(name=name, number=number, type=field_type, label=label)
    if type_name:
        field.type_name = type_name


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    proto = descriptor_pb2.FileDescriptorProto(name="scip.proto", package="scip", syntax="proto3")

    index = proto.message_type.add(name="Index")
    _add_field(index, "metadata", 1, _MESSAGE, type_name=".scip.Metadata")
    _add_field(index, "documents", 2, _MESSAGE, _REPEATED, ".scip.Document")

    metadata = proto.message_type.add(name="Metadata")
    _add_field(metadata, "tool_info", 2, _MESSAGE, type_name=".scip.ToolInfo")
    _add_field(metadata, "project_root", 3, _STRING)

    tool_info = proto.message_type.add(name="ToolInfo")
    _add_field(tool_info, "name", 1, _STRING)
    _add_field(tool_info, "version", 2, _STRING)
    _add_field(tool_info, "arguments", 3, _STRING, _REPEATED)

    document = proto.message_type.add(name="Document")
    _add_field(document, "relative_path", 1, _STRING)
    _add_field(document, "occurrences", 2, _MESSAGE, _REPEATED, ".scip.Occurrence")
    _add_field(document, "language", 4, _STRING)
    _add_field(document, "text", 5, _STRING)

    occurrence = proto.message_type.add(name="Occurrence")
    _add_field(occurrence, "range", 1, _INT32, _REPEATED)
    _add_field(occurrence, "symbol", 2, _STRING)
    _add_field(occurrence, "symbol_roles", 3, _INT32)
    _add_field(occurrence, "override_documentation", 4, _STRING, _REPEATED)
    _add_field(occurrence, "enclosing_range", 7, _INT32, _REPEATED)

    return proto


# Private pool so another copy of scip.proto loaded into the default pool
# cannot clash with this one
_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file().SerializeToString())

Index = message_factory.GetMessageClass(_pool.FindMessageTypeByName("scip.Index"))
Metadata = message_factory.GetMessageClass(_pool.FindMessageTypeByName("scip.Metadata"))
ToolInfo = message_factory.GetMessageClass(_pool.FindMessageTypeByName("scip.ToolInfo"))
Document = message_factory.GetMessageClass(_pool.FindMessageTypeByName("scip.Document"))
Occurrence = message_factory.GetMessageClass(_pool.FindMessageTypeByName("scip.Occurrence"))
