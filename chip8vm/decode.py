"""CHIP-8 instruction decoding."""

import enum

from chex import dataclass


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    return DecodedInstruction(
        raw=instruction,
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )


class Opcode(enum.Enum):
    """One variant per CHIP-8 instruction pattern, plus UNKNOWN."""
    CLS = "00E0"
    RET = "00EE"
    JP = "1NNN"
    CALL = "2NNN"
    SE_IMM = "3XNN"
    SNE_IMM = "4XNN"
    SE_REG = "5XY0"
    LD_IMM = "6XNN"
    ADD_IMM = "7XNN"
    LD_REG = "8XY0"
    OR = "8XY1"
    AND = "8XY2"
    XOR = "8XY3"
    ADD_REG = "8XY4"
    SUB = "8XY5"
    SHR = "8XY6"
    SUBN = "8XY7"
    SHL = "8XYE"
    SNE_REG = "9XY0"
    LD_I = "ANNN"
    JP_V0 = "BNNN"
    RND = "CXNN"
    DRW = "DXYN"
    SKP = "EX9E"
    SKNP = "EXA1"
    LD_VX_DT = "FX07"
    LD_KEY = "FX0A"
    LD_DT = "FX15"
    LD_ST = "FX18"
    ADD_I = "FX1E"
    LD_FONT = "FX29"
    BCD = "FX33"
    STORE = "FX55"
    LOAD = "FX65"
    UNKNOWN = "????"


_FIXED = {0x1: Opcode.JP, 0x2: Opcode.CALL, 0x3: Opcode.SE_IMM, 0x4: Opcode.SNE_IMM,
          0x6: Opcode.LD_IMM, 0x7: Opcode.ADD_IMM, 0xA: Opcode.LD_I, 0xB: Opcode.JP_V0,
          0xC: Opcode.RND, 0xD: Opcode.DRW}

_SYSTEM = {0x00E0: Opcode.CLS, 0x00EE: Opcode.RET}

_ALU = {0x0: Opcode.LD_REG, 0x1: Opcode.OR, 0x2: Opcode.AND, 0x3: Opcode.XOR,
        0x4: Opcode.ADD_REG, 0x5: Opcode.SUB, 0x6: Opcode.SHR, 0x7: Opcode.SUBN,
        0xE: Opcode.SHL}

_KEYS = {0x9E: Opcode.SKP, 0xA1: Opcode.SKNP}

_MISC = {0x07: Opcode.LD_VX_DT, 0x0A: Opcode.LD_KEY, 0x15: Opcode.LD_DT,
         0x18: Opcode.LD_ST, 0x1E: Opcode.ADD_I, 0x29: Opcode.LD_FONT,
         0x33: Opcode.BCD, 0x55: Opcode.STORE, 0x65: Opcode.LOAD}


def classify(instruction: int) -> Opcode:
    """Map a raw instruction word to its opcode variant."""
    inst = decode(int(instruction) & 0xFFFF)
    if inst.opcode in _FIXED:
        return _FIXED[inst.opcode]
    if inst.opcode == 0x0:
        return _SYSTEM.get(inst.raw, Opcode.UNKNOWN)
    if inst.opcode in (0x5, 0x9):
        if inst.n != 0:
            return Opcode.UNKNOWN
        return Opcode.SE_REG if inst.opcode == 0x5 else Opcode.SNE_REG
    if inst.opcode == 0x8:
        return _ALU.get(inst.n, Opcode.UNKNOWN)
    if inst.opcode == 0xE:
        return _KEYS.get(inst.nn, Opcode.UNKNOWN)
    return _MISC.get(inst.nn, Opcode.UNKNOWN)


def disassemble(instruction: int) -> str:
    """Render an instruction word as its pattern with operands filled in."""
    word = int(instruction) & 0xFFFF
    kind = classify(word)
    if kind is Opcode.UNKNOWN:
        return f"{word:04X} ???"
    inst = decode(word)
    operands = {"X": f"V{inst.x:X}", "Y": f"V{inst.y:X}", "N": f"{inst.n:X}",
                "NN": f"0x{inst.nn:02X}", "NNN": f"0x{inst.nnn:03X}"}
    fields = [operands[key] for key in ("X", "Y") if key in kind.value]
    for key in ("NNN", "NN", "N"):
        if kind.value.endswith(key):
            fields.append(operands[key])
            break
    return f"{word:04X} {kind.name} {', '.join(fields)}".rstrip()
