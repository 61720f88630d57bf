"""ConcatText stage.

Appends the configured "Concatenation Value" to the incoming flowfile
content, separated by the flowfile's `concat.delimiter` attribute (empty
when absent), and records the character length of the result in
`concatenated.string.length`.

Content is decoded and re-encoded with the same character set (UTF-8 unless
the "Character Set" property says otherwise). Length is the number of
decoded characters, not bytes. Content that does not decode, or a result
the character set cannot encode, is routed to `failure` unchanged.
"""

from __future__ import annotations
from ..errors import ContentCodecError, ContentDecodeError, ContentEncodeError
from ..pipeline.context import CONCAT_ERROR, FlowFile, ProcessContext, PropertyDescriptor, Relationship
from ..pipeline.session import ProcessSession
from .base import Processor
from .validators import CHARACTER_SET_VALIDATOR, NON_EMPTY_VALIDATOR

CONCAT_DELIMITER = "concat.delimiter"
CONCATENATED_STRING_LENGTH = "concatenated.string.length"

DEFAULT_CHARSET = "UTF-8"

CONCAT_PROPERTY = PropertyDescriptor(
    name="CONCAT_PROPERTY",
    display_name="Concatenation Value",
    description="Concatenates provided value to the incoming flowfile",
    required=True,
    validators=(NON_EMPTY_VALIDATOR,),
)

CHARACTER_SET = PropertyDescriptor(
    name="CHARACTER_SET",
    display_name="Character Set",
    description="Character set used to decode incoming content and encode the result",
    required=False,
    default=DEFAULT_CHARSET,
    validators=(NON_EMPTY_VALIDATOR, CHARACTER_SET_VALIDATOR),
)

SUCCESS = Relationship(
    "success",
    "Successfully processed flowfiles are transferred to this relationship",
)
FAILURE = Relationship(
    "failure",
    "Flowfiles whose content cannot be decoded with the configured character set",
)


def concatenate(content: str, delimiter: str | None, value: str) -> str:
    return content + (delimiter or "") + value


def decode_content(flowfile: FlowFile, data: bytes, charset: str) -> str:
    try:
        return data.decode(charset)
    except UnicodeDecodeError as e:
        raise ContentDecodeError(flowfile.uuid, charset, str(e)) from e


def encode_content(flowfile: FlowFile, text: str, charset: str) -> bytes:
    try:
        return text.encode(charset)
    except UnicodeEncodeError as e:
        raise ContentEncodeError(flowfile.uuid, charset, str(e)) from e


class ConcatText(Processor):
    name = "concat_text"
    description = "Concatenates incoming flowfile content with the provided `Concatenation Value` property"
    tags = ("concat", "text", "append")
    reads_attributes = {
        CONCAT_DELIMITER: "Delimiter placed between the incoming content and the concatenation value",
    }
    writes_attributes = {
        CONCATENATED_STRING_LENGTH: "Length in characters of the concatenated content",
        CONCAT_ERROR: "Reason the flowfile was routed to failure",
    }
    property_descriptors = (CONCAT_PROPERTY, CHARACTER_SET)
    relationship_set = frozenset({SUCCESS, FAILURE})

    def on_trigger(self, context: ProcessContext, session: ProcessSession) -> None:
        flowfile = session.get()
        if flowfile is None:
            return

        value = context.get_property(CONCAT_PROPERTY)
        charset = context.get_property(CHARACTER_SET)
        delimiter = flowfile.get_attribute(CONCAT_DELIMITER)

        try:
            content = decode_content(flowfile, session.read(flowfile), charset)
            result = concatenate(content, delimiter, value)
            data = encode_content(flowfile, result, charset)
        except ContentCodecError as e:
            # content is left as pulled
            self.log.warning(f"routing to failure: {e}")
            flowfile = session.put_attribute(flowfile, CONCAT_ERROR, str(e))
            session.transfer(flowfile, FAILURE)
            return

        flowfile = session.write(flowfile, data)
        flowfile = session.put_attribute(flowfile, CONCATENATED_STRING_LENGTH, str(len(result)))
        self.log.debug(f"uuid={flowfile.uuid} length={len(result)}")
        session.transfer(flowfile, SUCCESS)
