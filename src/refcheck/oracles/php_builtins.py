"""Classes, interfaces and enums that ship with PHP and its common extensions."""

BUILTIN_CLASSES = frozenset({
    # Core
    'stdClass', 'Closure', 'Generator', 'WeakReference', 'WeakMap', 'Fiber',
    'Attribute', 'ReturnTypeWillChange', 'AllowDynamicProperties', 'SensitiveParameter',
    'SensitiveParameterValue', 'Override', '__PHP_Incomplete_Class', 'php_user_filter',
    'Directory', 'ArrayObject', 'ArrayIterator', 'RecursiveArrayIterator',
    # Interfaces
    'Traversable', 'Iterator', 'IteratorAggregate', 'ArrayAccess', 'Countable',
    'Serializable', 'JsonSerializable', 'Stringable', 'UnitEnum', 'BackedEnum',
    'InternalIterator', 'DateTimeInterface', 'RecursiveIterator', 'OuterIterator',
    'SeekableIterator', 'SplObserver', 'SplSubject',
    # Errors and exceptions
    'Throwable', 'Exception', 'ErrorException', 'Error', 'CompileError', 'ParseError',
    'TypeError', 'ArgumentCountError', 'ValueError', 'ArithmeticError',
    'DivisionByZeroError', 'UnhandledMatchError', 'FiberError', 'ClosedGeneratorException',
    'JsonException', 'LogicException', 'BadFunctionCallException', 'BadMethodCallException',
    'DomainException', 'InvalidArgumentException', 'LengthException', 'OutOfRangeException',
    'RuntimeException', 'OutOfBoundsException', 'OverflowException', 'RangeException',
    'UnderflowException', 'UnexpectedValueException',
    # Date
    'DateTime', 'DateTimeImmutable', 'DateTimeZone', 'DateInterval', 'DatePeriod',
    'DateError', 'DateObjectError', 'DateRangeError', 'DateException',
    'DateInvalidTimeZoneException', 'DateInvalidOperationException',
    'DateMalformedStringException', 'DateMalformedIntervalStringException',
    'DateMalformedPeriodStringException',
    # SPL
    'SplDoublyLinkedList', 'SplQueue', 'SplStack', 'SplHeap', 'SplMinHeap', 'SplMaxHeap',
    'SplPriorityQueue', 'SplFixedArray', 'SplObjectStorage', 'SplFileInfo', 'SplFileObject',
    'SplTempFileObject', 'DirectoryIterator', 'FilesystemIterator', 'RecursiveDirectoryIterator',
    'GlobIterator', 'IteratorIterator', 'RecursiveIteratorIterator', 'FilterIterator',
    'RecursiveFilterIterator', 'CallbackFilterIterator', 'RecursiveCallbackFilterIterator',
    'ParentIterator', 'LimitIterator', 'CachingIterator', 'RecursiveCachingIterator',
    'NoRewindIterator', 'AppendIterator', 'InfiniteIterator', 'RegexIterator',
    'RecursiveRegexIterator', 'EmptyIterator', 'RecursiveTreeIterator', 'MultipleIterator',
    # Reflection
    'Reflection', 'Reflector', 'ReflectionException', 'ReflectionClass', 'ReflectionObject',
    'ReflectionMethod', 'ReflectionFunction', 'ReflectionFunctionAbstract', 'ReflectionProperty',
    'ReflectionParameter', 'ReflectionType', 'ReflectionNamedType', 'ReflectionUnionType',
    'ReflectionIntersectionType', 'ReflectionClassConstant', 'ReflectionEnum',
    'ReflectionEnumUnitCase', 'ReflectionEnumBackedCase', 'ReflectionAttribute',
    'ReflectionExtension', 'ReflectionGenerator', 'ReflectionReference', 'ReflectionFiber',
    # Extensions
    'PDO', 'PDOStatement', 'PDOException', 'PDORow', 'SimpleXMLElement', 'SimpleXMLIterator',
    'DOMDocument', 'DOMElement', 'DOMNode', 'DOMNodeList', 'DOMXPath', 'DOMAttr', 'DOMText',
    'DOMException', 'DOMImplementation', 'DOMDocumentFragment', 'XMLReader', 'XMLWriter',
    'CURLFile', 'CurlHandle', 'CurlMultiHandle', 'CurlShareHandle', 'finfo', 'ZipArchive',
    'SQLite3', 'SQLite3Stmt', 'SQLite3Result', 'mysqli', 'mysqli_result', 'mysqli_stmt',
    'mysqli_sql_exception', 'IntlDateFormatter', 'NumberFormatter', 'Collator', 'Locale',
    'Normalizer', 'MessageFormatter', 'IntlException', 'IntlChar', 'Transliterator',
    'GdImage', 'SessionHandler', 'SessionHandlerInterface', 'SessionIdInterface',
    'SessionUpdateTimestampHandlerInterface', 'SodiumException', 'HashContext',
    'Random\\Randomizer', 'Random\\Engine', 'Random\\CryptoSafeEngine',
    'Random\\Engine\\Mt19937', 'Random\\Engine\\PcgOneseq128XslRr64',
    'Random\\Engine\\Xoshiro256StarStar', 'Random\\Engine\\Secure', 'Random\\RandomException',
    'Random\\RandomError', 'Random\\BrokenRandomEngineError', 'BcMath\\Number',
})
