"""Authenticode oracle backed by the Windows ``WinVerifyTrust`` API.

Verification uses the generic verify-v2 policy with no UI and no
revocation checks.  Only available on Windows; constructing the oracle
elsewhere raises :class:`OracleUnavailableError`.
"""

import ctypes
import logging
import sys
import uuid

from sigcheck.oracles.base import OracleUnavailableError, SignatureOracle

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# wintrust.h constants
# ---------------------------------------------------------------------------

WINTRUST_ACTION_GENERIC_VERIFY_V2 = uuid.UUID("00AAC56B-CD44-11d0-8CC2-00C04FC295EE")

WTD_UI_NONE = 2
WTD_REVOKE_NONE = 0
WTD_CHOICE_FILE = 1
WTD_STATEACTION_VERIFY = 1
WTD_STATEACTION_CLOSE = 2

_DWORD = ctypes.c_uint32
_HANDLE = ctypes.c_void_p


class _GUID(ctypes.Structure):
    _fields_ = [
        ("Data1", _DWORD),
        ("Data2", ctypes.c_uint16),
        ("Data3", ctypes.c_uint16),
        ("Data4", ctypes.c_ubyte * 8),
    ]

    @classmethod
    def from_uuid(cls, value: uuid.UUID) -> "_GUID":
        return cls(
            value.time_low,
            value.time_mid,
            value.time_hi_version,
            (ctypes.c_ubyte * 8)(*value.bytes[8:]),
        )


class _WintrustFileInfo(ctypes.Structure):
    _fields_ = [
        ("cbStruct", _DWORD),
        ("pcwszFilePath", ctypes.c_wchar_p),
        ("hFile", _HANDLE),
        ("pgKnownSubject", ctypes.POINTER(_GUID)),
    ]


class _WintrustData(ctypes.Structure):
    _fields_ = [
        ("cbStruct", _DWORD),
        ("pPolicyCallbackData", ctypes.c_void_p),
        ("pSIPClientData", ctypes.c_void_p),
        ("dwUIChoice", _DWORD),
        ("fdwRevocationChecks", _DWORD),
        ("dwUnionChoice", _DWORD),
        ("pFile", ctypes.POINTER(_WintrustFileInfo)),
        ("dwStateAction", _DWORD),
        ("hWVTStateData", _HANDLE),
        ("pwszURLReference", ctypes.c_wchar_p),
        ("dwProvFlags", _DWORD),
        ("dwUIContext", _DWORD),
    ]


class WinTrustOracle(SignatureOracle):
    """Report a file as signed when ``WinVerifyTrust`` returns ``ERROR_SUCCESS``."""

    name = "wintrust"

    def __init__(self) -> None:
        if sys.platform != "win32":
            raise OracleUnavailableError(
                "The wintrust oracle requires Windows; "
                "pass --oracle module:attr to use another verifier"
            )
        wintrust = ctypes.WinDLL("wintrust")
        self._win_verify_trust = wintrust.WinVerifyTrust
        self._win_verify_trust.argtypes = [
            _HANDLE,
            ctypes.POINTER(_GUID),
            ctypes.c_void_p,
        ]
        self._win_verify_trust.restype = ctypes.c_long
        self._action = _GUID.from_uuid(WINTRUST_ACTION_GENERIC_VERIFY_V2)

    def _verify(self, path: str) -> bool:
        file_info = _WintrustFileInfo(
            cbStruct=ctypes.sizeof(_WintrustFileInfo),
            pcwszFilePath=path,
        )
        data = _WintrustData(
            cbStruct=ctypes.sizeof(_WintrustData),
            dwUIChoice=WTD_UI_NONE,
            fdwRevocationChecks=WTD_REVOKE_NONE,
            dwUnionChoice=WTD_CHOICE_FILE,
            pFile=ctypes.pointer(file_info),
            dwStateAction=WTD_STATEACTION_VERIFY,
        )

        try:
            status = self._win_verify_trust(
                None, ctypes.byref(self._action), ctypes.byref(data)
            )
        finally:
            # Release the state handle held by the verify call
            data.dwStateAction = WTD_STATEACTION_CLOSE
            self._win_verify_trust(None, ctypes.byref(self._action), ctypes.byref(data))

        if status != 0:
            logger.debug("WinVerifyTrust(%s) -> 0x%08X", path, status & 0xFFFFFFFF)
        return status == 0
